"""
Cover letter endpoints: generation, AI enhancement and feedback, owned CRUD.
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
from app.db.models.document import CoverLetter
from app.db.models.user import User
from app.schemas.document import CoverLetterRequest
from app.services.enhancer_service import ContentEnhancer, get_enhancer, get_optional_enhancer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cover-letter", tags=["Cover Letter"])

LABEL = "Cover letter"


@router.post("/generate", status_code=status.HTTP_201_CREATED)
@router.post("", status_code=status.HTTP_201_CREATED)
def generate_cover_letter(
    body: CoverLetterRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
    enhancer: Optional[ContentEnhancer] = Depends(get_optional_enhancer),
):
    enhance = (lambda data: enhancer.enhance_cover_letter(data, body.lang)) if enhancer else None
    return generate_document(db, CoverLetter, user, body.cover_letter_data, enhance, LABEL)


@router.post("/enhance")
def enhance_cover_letter(
    body: CoverLetterRequest,
    user: User = Depends(require_active_plan("pro")),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    try:
        enhanced = enhancer.enhance_cover_letter(body.cover_letter_data, body.lang)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to enhance cover letter with AI") from e
    return {"success": True, "data": {**body.cover_letter_data, **enhanced}}


@router.post("/ai-feedback")
def cover_letter_feedback(
    body: CoverLetterRequest,
    identity: Identity = Depends(get_current_user),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    try:
        feedback = enhancer.feedback(body.cover_letter_data, "coverLetter", body.lang)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to generate AI feedback") from e
    return {"success": True, "feedback": feedback}


@router.get("")
def list_cover_letters(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cover_letters = crud.list_documents_for_user(db, CoverLetter, identity.id)
    return {"success": True, "data": [c.to_dict() for c in cover_letters]}


@router.get("/{cover_letter_id}")
def get_cover_letter(
    cover_letter_id: str,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    cover_letter = load_owned_document(db, CoverLetter, cover_letter_id, identity, policy, LABEL)
    return {"success": True, "data": cover_letter.to_dict()}


@router.put("/{cover_letter_id}")
def update_cover_letter(
    cover_letter_id: str,
    payload: Dict[str, Any] = Body(...),
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    cover_letter = load_owned_document(db, CoverLetter, cover_letter_id, identity, policy, LABEL)
    cover_letter = crud.update_document(db, cover_letter, payload)
    return {"success": True, "data": cover_letter.to_dict()}


@router.delete("/{cover_letter_id}")
def delete_cover_letter(
    cover_letter_id: str,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
):
    cover_letter = load_owned_document(db, CoverLetter, cover_letter_id, identity, policy, LABEL)
    crud.delete_document(db, cover_letter)
    return {"success": True, "message": "Cover letter deleted successfully"}
