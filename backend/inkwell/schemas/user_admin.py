"""
Inkwell Backend — Admin User Management Schemas
================================================
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class UserListItem(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")

    model_config = {"populate_by_name": True}


class UserListResponse(BaseModel):
    users: List[UserListItem]
    pagination: Pagination


class RoleChangeRequest(BaseModel):
    """Body of POST /api/admin/users/{user_id}/role."""

    new_role: Literal["reader", "author", "admin"] = Field(alias="newRole")
    reason: Optional[str] = Field(default=None, min_length=1, max_length=500)

    model_config = {"populate_by_name": True}


class RoleChangeResult(BaseModel):
    user_id: uuid.UUID = Field(alias="userId")
    old_role: str = Field(alias="oldRole")
    new_role: str = Field(alias="newRole")
    changed_by: uuid.UUID = Field(alias="changedBy")
    changed_at: datetime = Field(alias="changedAt")

    model_config = {"populate_by_name": True}


class ActivationRequest(BaseModel):
    """Body of POST /api/admin/users/{user_id}/deactivate."""

    is_active: bool
    reason: Optional[str] = Field(default=None, min_length=1, max_length=500)


class ActivationResult(BaseModel):
    user_id: uuid.UUID = Field(alias="userId")
    is_active: bool
    changed_by: uuid.UUID = Field(alias="changedBy")
    changed_at: datetime = Field(alias="changedAt")

    model_config = {"populate_by_name": True}
