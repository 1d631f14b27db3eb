"""
Pydantic schemas for resume and cover-letter endpoints.

Document payloads are free-form editor state, so they are carried as dicts.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ResumeRequest(BaseModel):
    resume_data: Dict[str, Any] = Field(..., alias="resumeData", description="Resume editor payload")
    lang: Optional[str] = Field(default="en", description="'en' or 'fr'")

    model_config = ConfigDict(populate_by_name=True)


class CoverLetterRequest(BaseModel):
    cover_letter_data: Dict[str, Any] = Field(..., alias="coverLetterData", description="Cover letter editor payload")
    lang: Optional[str] = Field(default="en", description="'en' or 'fr'")

    model_config = ConfigDict(populate_by_name=True)
