"""
Toolhub Backend — Tool Schemas
================================

What:  API contracts for the public catalog and admin tool management.
How:   URL fields are validated as absolute http(s) URLs but kept verbatim
       (no trailing-slash normalization), because tool URLs are compared by
       exact string equality for duplicate detection.
"""

import uuid
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from toolhub.models.tag import TAG_NAME_MAX_LENGTH
from toolhub.models.tool import TOOL_NAME_MAX_LENGTH, TOOL_URL_MAX_LENGTH
from toolhub.schemas.common import PaginationMeta
from toolhub.schemas.tag import TagSummary


def validate_http_url(value: str) -> str:
    """Strip whitespace and require an absolute http(s) URL with a host."""
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid URL format. Use an absolute http(s) URL.")
    return value


def validate_tag_names(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    cleaned = []
    for value in values:
        value = value.strip()
        if not value:
            raise ValueError("Tag names cannot be empty")
        if len(value) > TAG_NAME_MAX_LENGTH:
            raise ValueError(f"Tag names are limited to {TAG_NAME_MAX_LENGTH} characters")
        cleaned.append(value)
    return cleaned


class ToolResponse(BaseModel):
    """Full tool representation with its tags (sorted by name)."""
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    url: str
    tags: List[TagSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ToolListResponse(BaseModel):
    data: List[ToolResponse]
    pagination: PaginationMeta


class ToolCreate(BaseModel):
    name: str = Field(min_length=1, max_length=TOOL_NAME_MAX_LENGTH)
    url: str = Field(max_length=TOOL_URL_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=1000)
    tags: List[str] = Field(default_factory=list, description="Tag names; created when missing")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate_http_url(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: List[str]) -> List[str]:
        return validate_tag_names(v) or []


class ToolUpdate(BaseModel):
    """
    Partial update. `tags` omitted leaves the tag set alone; `tags: []` clears it;
    any list replaces the tag set (diffed against the current links).
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=TOOL_NAME_MAX_LENGTH)
    url: Optional[str] = Field(default=None, max_length=TOOL_URL_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=1000)
    tags: Optional[List[str]] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v) if v is not None else None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return validate_tag_names(v)
