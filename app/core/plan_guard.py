import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import Identity, get_current_user, get_current_user_obj, get_db
from app.core.errors import AuthorizationError
from app.core.gating import AuthorizationPolicy, get_authorization_policy, has_active_plan
from app.db.models.user import User

logger = logging.getLogger(__name__)


def require_active_plan(required_tier: str):
    """Dependency factory: the caller must hold an active subscription of the tier."""
    def checker(user: User = Depends(get_current_user_obj)) -> User:
        if not has_active_plan(user, required_tier):
            logger.info(f"Plan check failed: user_id={user.id}, plan={user.subscription_plan}, required={required_tier}")
            raise AuthorizationError(f"{required_tier.title()} subscription required for AI enhancement")
        return user

    return checker


def require_admin(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> Identity:
    if not policy.is_admin_identity(db, identity.id, identity.email):
        logger.warning(f"Admin access denied: user_id={identity.id}")
        raise AuthorizationError("Access denied. Admin privileges required.")
    return identity
