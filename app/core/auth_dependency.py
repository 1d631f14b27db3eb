from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError
from app.core.security import decode_access_token
from app.db import crud
from app.db.session import SessionLocal
from app.db.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Verified caller identity carried by a bearer token."""
    id: str
    email: str


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_token(token: Optional[str]) -> Identity:
    """Turn a bearer credential into an Identity or raise AuthenticationError."""
    if not token:
        raise AuthenticationError("No authentication token, access denied")
    payload = decode_access_token(token)
    return Identity(id=payload["uid"], email=payload["email"])


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """Get the caller identity from the Authorization header."""
    return verify_token(token)


def get_current_user_obj(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> User:
    """Get the caller's User record by token uid, creating it on first sight."""
    return crud.get_or_create_user(db, identity.id, identity.email)
