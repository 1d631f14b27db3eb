"""
Resume endpoints: generation, AI enhancement and feedback, owned CRUD.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from app.api.routes.documents import generate_document, load_owned_document
from app.core.auth_dependency import Identity, get_current_user, get_current_user_obj, get_db
from app.core.errors import ExternalServiceError
from app.core.gating import AuthorizationPolicy, get_authorization_policy
from app.core.plan_guard import require_active_plan
from app.db import crud
from app.db.models.document import Resume
from app.db.models.user import User
from app.schemas.document import ResumeRequest
from app.services.enhancer_service import ContentEnhancer, get_enhancer, get_optional_enhancer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["Resume"])

LABEL = "Resume"


@router.post("/generate", status_code=status.HTTP_201_CREATED)
@router.post("", status_code=status.HTTP_201_CREATED)
def generate_resume(
    body: ResumeRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
    enhancer: Optional[ContentEnhancer] = Depends(get_optional_enhancer),
):
    enhance = (lambda data: enhancer.enhance_resume(data, body.lang)) if enhancer else None
    return generate_document(db, Resume, user, body.resume_data, enhance, LABEL)


@router.post("/enhance")
def enhance_resume(
    body: ResumeRequest,
    user: User = Depends(require_active_plan("pro")),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    try:
        enhanced = enhancer.enhance_resume(body.resume_data, body.lang)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to enhance resume with AI") from e
    return {"success": True, "data": {**body.resume_data, **enhanced}}


@router.post("/enhance-summary")
def enhance_resume_summary(
    body: ResumeRequest,
    user: User = Depends(require_active_plan("pro")),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    try:
        enhanced = enhancer.enhance_resume_summary(body.resume_data, body.lang)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to enhance summary with AI") from e
    return {"success": True, "data": {**body.resume_data, **enhanced}}


@router.post("/ai-feedback")
def resume_feedback(
    body: ResumeRequest,
    identity: Identity = Depends(get_current_user),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    try:
        feedback = enhancer.feedback(body.resume_data, "resume", body.lang)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to generate AI feedback") from e
    return {"success": True, "feedback": feedback}


@router.get("")
def list_resumes(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    resumes = crud.list_documents_for_user(db, Resume, identity.id)
    return {"success": True, "data": [r.to_dict() for r in resumes]}


@router.get("/{resume_id}")
def get_resume(
    resume_id: str,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    resume = load_owned_document(db, Resume, resume_id, identity, policy, LABEL)
    return {"success": True, "data": resume.to_dict()}


@router.put("/{resume_id}")
def update_resume(
    resume_id: str,
    payload: Dict[str, Any] = Body(...),
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    resume = load_owned_document(db, Resume, resume_id, identity, policy, LABEL)
    resume = crud.update_document(db, resume, payload)
    return {"success": True, "data": resume.to_dict()}


@router.delete("/{resume_id}")
def delete_resume(
    resume_id: str,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    resume = load_owned_document(db, Resume, resume_id, identity, policy, LABEL)
    crud.delete_document(db, resume)
    return {"success": True, "message": "Resume deleted successfully"}
