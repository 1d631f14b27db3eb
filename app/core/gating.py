"""
Access decisions.

Plan entitlement and admin checks are pure functions over a User record;
the FastAPI dependencies that enforce them live in app.core.plan_guard.
"""
import logging
import re
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.core import config
from app.db import crud
from app.db.models.user import User, UserRole, SubscriptionStatus, Plan

logger = logging.getLogger(__name__)


def normalize_plan(plan: Optional[str]) -> str:
    """Lowercase a plan name and remove all whitespace ("Pro Plus" -> "proplus")."""
    if not plan:
        return ""
    return re.sub(r"\s+", "", plan).lower()


def has_active_plan(user: Optional[User], required_tier: str) -> bool:
    """
    True iff the subscription is active and its plan contains the tier token.

    Matching is a substring test on the normalized plan name, so "Pro Plus"
    and "pro-legacy" both satisfy a "pro" requirement.
    """
    if user is None:
        return False
    if user.subscription_status != SubscriptionStatus.ACTIVE.value:
        return False
    plan = normalize_plan(user.subscription_plan)
    if not plan:
        return False
    return normalize_plan(required_tier) in plan


def has_active_pro(user: Optional[User]) -> bool:
    return has_active_plan(user, Plan.PRO.value)


class AuthorizationPolicy:
    """
    Admin policy: the configured privileged emails unioned with the persisted role.
    """

    def __init__(self, admin_emails: Iterable[str] = ()):
        self.admin_emails = frozenset(e.strip().lower() for e in admin_emails if e and e.strip())

    def is_privileged_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    def is_admin(self, user: Optional[User]) -> bool:
        if user is None:
            return False
        return self.is_privileged_email(user.email) or user.role == UserRole.ADMIN.value

    def is_admin_identity(self, db: Session, user_id: str, email: str) -> bool:
        """Check a verified identity, loading the role from the store. Denies on lookup failure."""
        if self.is_privileged_email(email):
            return True
        try:
            user = crud.get_user(db, user_id)
        except Exception as e:
            logger.error(f"Admin lookup failed for user_id={user_id}: {e}", exc_info=True)
            return False
        return user is not None and user.role == UserRole.ADMIN.value


def get_authorization_policy() -> AuthorizationPolicy:
    return AuthorizationPolicy(config.ADMIN_EMAILS)
