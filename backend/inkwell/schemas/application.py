"""
Inkwell Backend — Author Application Schemas
=============================================
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AuthorApplicationCreate(BaseModel):
    """
    Body of POST /api/author-application.

    Lengths are measured after surrounding whitespace is stripped, so a
    padded short answer does not pass.
    """

    bio: str = Field(min_length=100, max_length=1000)
    credentials: str = Field(min_length=50, max_length=2000)
    writing_samples: Optional[str] = Field(default=None, max_length=5000)
    motivation: str = Field(min_length=100, max_length=1000)

    model_config = {"str_strip_whitespace": True}


class AuthorApplicationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    bio: str
    credentials: str
    writing_samples: Optional[str] = None
    motivation: str
    status: str
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicantSummary(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class AdminApplicationItem(AuthorApplicationResponse):
    applicant: Optional[ApplicantSummary] = None


class ApplicationListResponse(BaseModel):
    applications: List[AdminApplicationItem]
    count: int


class ApplicationReview(BaseModel):
    """Body of POST /api/admin/author-applications/{id}/review."""

    status: Literal["approved", "rejected"]
    reason: Optional[str] = Field(default=None, max_length=1000)


class ReviewResult(BaseModel):
    application_id: uuid.UUID = Field(alias="applicationId")
    status: str
    message: Optional[str] = None

    model_config = {"populate_by_name": True}
