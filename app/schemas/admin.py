"""
Pydantic schemas for admin endpoints.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from app.db.models.user import UserRole


class UpdateUserFields(BaseModel):
    """
    Fields an admin may change on a user.

    Anything else (email, subscription, billing reference, ...) is rejected.
    """
    display_name: Optional[str] = Field(default=None, alias="displayName", max_length=200)
    role: Optional[UserRole] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_columns(self) -> dict:
        """Column name -> value for the fields actually sent."""
        fields = {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}
        if "role" in fields:
            fields["role"] = fields["role"].value
        return fields
