import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core import config
from app.core.auth_dependency import Identity, get_current_user, get_db
from app.core.errors import AuthenticationError, ValidationError
from app.core.rate_limit import rate_limit
from app.core.security import hash_password, verify_password, create_access_token
from app.db import crud
from app.db.models.user import User
from app.schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

credential_limiter = rate_limit("auth", max_requests=config.LOGIN_RATE_LIMIT, window_seconds=60)


def _session_payload(user: User) -> dict:
    token = create_access_token({"uid": user.id, "email": user.email})
    return {
        "token": token,
        "user": {
            "id": user.id,
            "email": user.email,
        },
    }


@router.get("")
def auth_root():
    return {"message": "Auth API root. Use /login, /logout, /user"}


@router.post("/login", dependencies=[Depends(credential_limiter)])
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    Issue a bearer token.

    With a uid the identity was already verified by the sign-in provider and
    the user record is created on first sight. The uid is authoritative: an
    email already held by another account is refused. Without a uid the
    password is checked against a credential account.
    """
    if body.uid:
        user = crud.get_or_create_user(db, body.uid, body.email)
    else:
        user = crud.get_user_by_email(db, body.email)
        if not user or not verify_password(body.password, user.password_hash):
            logger.info(f"Failed credential login for {body.email}")
            raise AuthenticationError("Invalid credentials")

    logger.info(f"Token issued for user_id={user.id}")
    return {"success": True, "data": _session_payload(user)}


@router.post("/signup", status_code=status.HTTP_201_CREATED, dependencies=[Depends(credential_limiter)])
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, body.email):
        raise ValidationError("Email already registered")

    user = crud.create_user(
        db,
        email=body.email,
        password_hash=hash_password(body.password),
        display_name=body.display_name,
    )
    return {
        "success": True,
        "message": "User created successfully",
        "data": _session_payload(user),
    }


@router.post("/logout")
def logout(identity: Identity = Depends(get_current_user)):
    # tokens are stateless; the client drops its copy
    return {"success": True, "message": "Logged out"}


@router.get("/user")
def get_user(identity: Identity = Depends(get_current_user)):
    return {
        "success": True,
        "data": {
            "id": identity.id,
            "email": identity.email,
        },
    }
