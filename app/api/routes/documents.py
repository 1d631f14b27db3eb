"""
Shared helpers for the resume and cover-letter routers.

Both document kinds go through the same ownership check and the same
generate-then-save flow; only the enhancement step differs.
"""
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.auth_dependency import Identity
from app.core.errors import AppError, AuthorizationError, NotFoundError
from app.core.gating import AuthorizationPolicy, has_active_pro
from app.db import crud
from app.db.crud import DocumentModel
from app.db.models.user import User

logger = logging.getLogger(__name__)


def load_owned_document(
    db: Session,
    model: DocumentModel,
    document_id: str,
    identity: Identity,
    policy: AuthorizationPolicy,
    label: str,
):
    """
    Fetch a document the caller may act on.

    Raises:
        NotFoundError: No such document
        AuthorizationError: Caller is neither the owner nor an admin
    """
    document = crud.get_document(db, model, document_id)
    if not document:
        raise NotFoundError(f"{label} not found")

    if document.user_id != identity.id and not policy.is_admin_identity(db, identity.id, identity.email):
        logger.warning(f"{label} access denied: id={document_id}, user_id={identity.id}")
        raise AuthorizationError(f"Not authorized to access this {label.lower()}")

    return document


def generate_document(
    db: Session,
    model: DocumentModel,
    user: User,
    data: Dict[str, Any],
    enhance: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]],
    label: str,
) -> Dict[str, Any]:
    """
    Create an owned document, enhanced first when the user has Pro.

    Enhancement failures fall back to the submitted data. A failed save still
    returns the (possibly enhanced) data, flagged with a warning.
    """
    content = dict(data)

    if enhance is not None and has_active_pro(user):
        try:
            content = {**data, **enhance(data)}
        except AppError as e:
            logger.warning(f"{label} enhancement failed for user_id={user.id}, saving original: {e.message}")
    else:
        logger.info(f"Skipping {label.lower()} enhancement for user_id={user.id}")

    try:
        document = crud.create_document(db, model, user.id, content)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{label} save failed for user_id={user.id}: {e}", exc_info=True)
        return {
            "success": True,
            "data": {**content, "userId": user.id},
            "warning": f"{label} was generated but could not be saved to database",
        }

    return {"success": True, "data": document.to_dict()}
