"""
Pydantic schemas for payment endpoints.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    """Request schema for creating a checkout session."""
    plan: str = Field(..., min_length=1, description="Plan key: 'basic' or 'pro'")
    currency: Optional[str] = Field(default="USD", description="Price currency, 'USD' or 'EUR'")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "plan": "pro",
            "currency": "EUR"
        }
    })
