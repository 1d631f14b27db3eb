"""
Resume and cover-letter models.

Both document kinds share one lifecycle: an owner fixed at creation, a
free-form JSON payload written by the editor, and timestamps.
"""
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import declared_attr

from app.db.base import Base
from app.db.models.user import utcnow

# Keys managed by the server; never taken from a client payload
SERVER_FIELDS = ("id", "userId", "createdAt", "updatedAt")


class DocumentMixin:
    """Columns and serialization shared by resumes and cover letters."""

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    @declared_attr
    def user_id(cls):
        return Column(String(128), ForeignKey("users.id"), nullable=False, index=True)

    content = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> dict:
        data = dict(self.content or {})
        data.update({
            "id": self.id,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        })
        return data

    def __repr__(self):
        return f"<{type(self).__name__}(id={self.id}, user_id={self.user_id})>"


class Resume(DocumentMixin, Base):
    __tablename__ = "resumes"


class CoverLetter(DocumentMixin, Base):
    __tablename__ = "cover_letters"


def strip_server_fields(payload: dict) -> dict:
    """Drop server-managed keys from a client payload."""
    return {k: v for k, v in (payload or {}).items() if k not in SERVER_FIELDS}
