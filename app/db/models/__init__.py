"""
Database models module.

Importing this package registers every model with SQLAlchemy's Base.metadata,
which both create_all() and Alembic autogenerate rely on.
"""
from app.db.models.user import User, UserRole, SubscriptionStatus, Plan
from app.db.models.document import Resume, CoverLetter

__all__ = [
    "User",
    "UserRole",
    "SubscriptionStatus",
    "Plan",
    "Resume",
    "CoverLetter",
]
