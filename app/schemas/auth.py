"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


def _check_password_bytes(v: str) -> str:
    password_bytes = v.encode("utf-8")
    if len(password_bytes) > 72:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    if len(password_bytes) < 8:
        raise ValueError("Password must be at least 8 characters")
    return v


class LoginRequest(BaseModel):
    """
    Request schema for login.

    Either an externally verified identity ({uid, email}) or credentials
    ({email, password}).
    """
    uid: Optional[str] = Field(default=None, min_length=1, max_length=128, description="Identity provider user ID")
    email: EmailStr = Field(..., description="User's email address")
    password: Optional[str] = Field(default=None, description="Password for credential accounts")

    @model_validator(mode="after")
    def require_uid_or_password(self):
        if not self.uid and not self.password:
            raise ValueError("User ID and email are required")
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "uid": "k3Jf9sQ2",
            "email": "jane.doe@example.com"
        }
    })


class SignupRequest(BaseModel):
    """Request schema for credential signup."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password (min 8 characters)")
    display_name: Optional[str] = Field(default=None, alias="displayName", max_length=200)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length in bytes (bcrypt limit is 72 bytes)."""
        return _check_password_bytes(v)

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "email": "jane.doe@example.com",
            "password": "SecurePass123",
            "displayName": "Jane Doe"
        }
    })
