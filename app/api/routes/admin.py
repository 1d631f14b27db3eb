"""
Admin endpoints. Every route requires an admin caller; document routes
act on any user's records without ownership checks.
"""
import logging

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Dict

from app.core.auth_dependency import get_db
from app.core.errors import NotFoundError, ValidationError
from app.core.plan_guard import require_admin
from app.db import crud
from app.db.crud import DOCUMENT_MODELS
from app.db.models.document import Resume, CoverLetter
from app.schemas.admin import UpdateUserFields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def _model_for(document_type: str):
    model = DOCUMENT_MODELS.get(document_type)
    if model is None:
        raise ValidationError("Invalid document type")
    return model


def _user_summary(user) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "subscription": user.subscription,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


@router.get("/stats")
def admin_stats(db: Session = Depends(get_db)):
    users = crud.list_users(db)
    return {
        "success": True,
        "data": {
            "totalUsers": len(users),
            "totalResumes": crud.count_documents(db, Resume),
            "totalCoverLetters": crud.count_documents(db, CoverLetter),
            "recentUsers": [_user_summary(u) for u in users[:5]],
        },
    }


@router.get("/users")
def admin_list_users(db: Session = Depends(get_db)):
    return {"success": True, "data": [u.to_dict() for u in crud.list_users(db)]}


@router.put("/users/{user_id}")
def admin_update_user(
    user_id: str,
    body: UpdateUserFields,
    db: Session = Depends(get_db),
):
    user = crud.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    fields = body.to_columns()
    if fields:
        crud.update_user(db, user, fields)
        logger.info(f"Admin updated user_id={user_id}: fields={sorted(fields)}")

    return {"success": True, "message": "User updated successfully", "data": user.to_dict()}


@router.get("/documents")
def admin_list_documents(db: Session = Depends(get_db)):
    emails = {u.id: u.email for u in crud.list_users(db)}
    documents = []
    for document_type, model in DOCUMENT_MODELS.items():
        for document in crud.list_all_documents(db, model):
            documents.append({
                **document.to_dict(),
                "type": document_type,
                "userEmail": emails.get(document.user_id, "Unknown"),
            })
    documents.sort(key=lambda d: d["createdAt"] or "", reverse=True)
    return {"success": True, "data": documents}


@router.put("/documents/{document_id}")
def admin_update_document(
    document_id: str,
    document_type: str = Query(..., alias="type"),
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    model = _model_for(document_type)
    document = crud.get_document(db, model, document_id)
    if not document:
        raise NotFoundError("Document not found")
    document = crud.update_document(db, document, payload)
    return {"success": True, "message": "Document updated successfully", "data": document.to_dict()}


@router.delete("/documents/{document_id}")
def admin_delete_document(
    document_id: str,
    document_type: str = Query(..., alias="type"),
    db: Session = Depends(get_db),
):
    model = _model_for(document_type)
    document = crud.get_document(db, model, document_id)
    if not document:
        raise NotFoundError("Document not found")
    crud.delete_document(db, document)
    return {"success": True, "message": "Document deleted successfully"}
