"""
Record store adapter.

Key-addressed persistence for users, resumes and cover letters: create,
get-by-id, get-by-secondary-field, update-merge and delete. Routes and
services go through these helpers instead of building queries themselves.
"""
import logging
from datetime import datetime
from typing import Optional, List, Type, Union

from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError
from app.db.models.user import User, UserRole, SubscriptionStatus, Plan
from app.db.models.document import Resume, CoverLetter, strip_server_fields

logger = logging.getLogger(__name__)

DocumentModel = Union[Type[Resume], Type[CoverLetter]]

DOCUMENT_MODELS = {
    "resume": Resume,
    "coverLetter": CoverLetter,
}


# ============================================
# Users
# ============================================

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_billing_ref(db: Session, customer_ref: str) -> Optional[User]:
    return db.query(User).filter(User.billing_customer_ref == customer_ref).first()


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def create_user(
    db: Session,
    email: str,
    user_id: Optional[str] = None,
    password_hash: Optional[str] = None,
    display_name: Optional[str] = None,
) -> User:
    """Create a user in the rest state: free plan, active, plain role."""
    user = User(
        email=email,
        password_hash=password_hash,
        display_name=display_name,
        role=UserRole.USER.value,
        subscription_status=SubscriptionStatus.ACTIVE.value,
        subscription_plan=Plan.FREE.value,
        subscription_cancel_at_period_end=False,
    )
    if user_id:
        user.id = user_id
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User created: user_id={user.id}")
    return user


def get_or_create_user(db: Session, user_id: str, email: str) -> User:
    """
    Lookup-before-create keyed on the identity uid.

    An email already held by a different uid is never handed over; the
    caller gets AuthenticationError instead of that record.
    """
    user = get_user(db, user_id)
    if user:
        return user

    holder = get_user_by_email(db, email)
    if holder:
        logger.warning(f"Identity uid={user_id} rejected: email belongs to user_id={holder.id}")
        raise AuthenticationError("Email is linked to a different account")

    return create_user(db, email=email, user_id=user_id)


def update_user(db: Session, user: User, fields: dict) -> User:
    """Merge ``fields`` (column name -> value) onto the user in one commit."""
    for field, value in fields.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def set_billing_customer_ref(db: Session, user: User, customer_ref: Optional[str]) -> User:
    return update_user(db, user, {"billing_customer_ref": customer_ref})


def write_subscription(
    db: Session,
    user: User,
    *,
    reference_id: Optional[str],
    status: str,
    plan: str,
    cancel_at_period_end: bool = False,
    ends_at: Optional[datetime] = None,
) -> User:
    """
    Overwrite the whole subscription state of a user.

    Every field is assigned before the single commit so readers never see a
    half-written subscription.
    """
    return update_user(db, user, {
        "subscription_reference_id": reference_id,
        "subscription_status": status,
        "subscription_plan": plan,
        "subscription_cancel_at_period_end": cancel_at_period_end,
        "subscription_ends_at": ends_at,
    })


# ============================================
# Documents
# ============================================

def create_document(db: Session, model: DocumentModel, user_id: str, payload: dict):
    document = model(user_id=user_id, content=strip_server_fields(payload))
    db.add(document)
    db.commit()
    db.refresh(document)
    logger.info(f"{model.__name__} created: id={document.id}, user_id={user_id}")
    return document


def get_document(db: Session, model: DocumentModel, document_id: str):
    return db.query(model).filter(model.id == document_id).first()


def list_documents_for_user(db: Session, model: DocumentModel, user_id: str):
    return (
        db.query(model)
        .filter(model.user_id == user_id)
        .order_by(model.created_at.desc())
        .all()
    )


def list_all_documents(db: Session, model: DocumentModel):
    return db.query(model).order_by(model.created_at.desc()).all()


def update_document(db: Session, document, payload: dict):
    """Merge the payload over the stored content; owner and id never change."""
    merged = dict(document.content or {})
    merged.update(strip_server_fields(payload))
    # reassign so the JSON column is flagged dirty
    document.content = merged
    db.commit()
    db.refresh(document)
    logger.info(f"{type(document).__name__} updated: id={document.id}")
    return document


def delete_document(db: Session, document) -> None:
    document_id = document.id
    db.delete(document)
    db.commit()
    logger.info(f"{type(document).__name__} deleted: id={document_id}")


def count_documents(db: Session, model: DocumentModel) -> int:
    return db.query(model).count()
