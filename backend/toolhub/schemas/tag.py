"""
Toolhub Backend — Tag Schemas
===============================

What:  API contracts for tag listing and admin tag management.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from toolhub.models.tag import TAG_NAME_MAX_LENGTH
from toolhub.schemas.common import PaginationMeta


class TagResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TagSummary(BaseModel):
    """Compact tag embedded in tool payloads."""
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class TagListResponse(BaseModel):
    data: List[TagResponse]
    pagination: PaginationMeta


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=1000)


class TagUpdate(BaseModel):
    """
    Partial update. Omitted fields are left alone; description may be set to
    null explicitly to clear it.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=1000)
