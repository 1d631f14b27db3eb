import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Boolean
from app.db.base import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELED = "canceled"


class Plan(str, enum.Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"


class User(Base):
    __tablename__ = "users"

    # Identity-provider uid for federated accounts, generated for credential accounts
    id = Column(String(128), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.USER.value)

    # Set once, reused across checkout attempts
    billing_customer_ref = Column(String, nullable=True, index=True)

    # Written only by the subscription synchronizer, always as a whole
    subscription_reference_id = Column(String, nullable=True)
    subscription_status = Column(String, nullable=False, default=SubscriptionStatus.ACTIVE.value)
    subscription_plan = Column(String, nullable=False, default=Plan.FREE.value)
    subscription_cancel_at_period_end = Column(Boolean, nullable=False, default=False)
    subscription_ends_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def subscription(self) -> dict:
        return {
            "referenceId": self.subscription_reference_id,
            "status": self.subscription_status,
            "plan": self.subscription_plan,
            "cancelAtPeriodEnd": bool(self.subscription_cancel_at_period_end),
            "endsAt": self.subscription_ends_at.isoformat() if self.subscription_ends_at else None,
        }

    def to_dict(self) -> dict:
        """Public projection; never includes the password hash or billing reference."""
        return {
            "id": self.id,
            "email": self.email,
            "displayName": self.display_name or "",
            "role": self.role,
            "subscription": self.subscription,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', plan='{self.subscription_plan}')>"
