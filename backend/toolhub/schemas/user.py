"""
Toolhub Backend — User Schemas
================================
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator

from toolhub.models.user import UserRole
from toolhub.schemas.common import PaginationMeta


def _check_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain or " " in v:
        raise ValueError("Invalid email address")
    return v


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    data: List[UserResponse]
    pagination: PaginationMeta


class UserCreate(BaseModel):
    email: str = Field(max_length=320)
    role: UserRole = UserRole.USER

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class UserRoleUpdate(BaseModel):
    role: UserRole
