"""
Toolhub Backend — Tool Request Schemas
========================================

What:  API contracts for suggestion submission and the admin review workflow.

Review response:
    A transition always answers with the updated request. For approvals it also
    carries what happened to the catalog:
        - tool / tool_outcome: "created" or "already_exists"
        - link_report: linked / already_linked counts and per-tag failures
        - warnings: tag problems that did NOT stop the approval
    Hard failures never produce this body; they use ErrorResponse.
"""

import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from toolhub.schemas.common import PaginationMeta
from toolhub.schemas.tool import ToolResponse, validate_http_url, validate_tag_names


class ToolRequestResponse(BaseModel):
    id: uuid.UUID
    name: str
    url: str
    description: Optional[str] = None
    tags: Optional[Any] = Field(
        default=None,
        description="Raw tag names as submitted (list; legacy rows may hold a string)",
    )
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ToolRequestListResponse(BaseModel):
    data: List[ToolRequestResponse]
    pagination: PaginationMeta


class ToolRequestCreate(BaseModel):
    """Public suggestion form."""
    name: str = Field(min_length=3, max_length=100)
    url: str = Field(max_length=2048)
    description: str = Field(min_length=10, max_length=1000)
    tags: List[str] = Field(default_factory=list)

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate_http_url(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: List[str]) -> List[str]:
        return validate_tag_names(v) or []


class ToolRequestSubmitResponse(BaseModel):
    message: str = "Tool request submitted successfully!"
    data: ToolRequestResponse


class TransitionRequest(BaseModel):
    status: Literal["approved", "denied"] = Field(description="Target review status")


class LinkFailureResponse(BaseModel):
    tag_id: uuid.UUID
    tag: str
    error: str


class LinkReportResponse(BaseModel):
    linked: int = 0
    already_linked: int = 0
    failed: List[LinkFailureResponse] = Field(default_factory=list)


class TransitionResponse(BaseModel):
    message: str
    request: ToolRequestResponse
    tool: Optional[ToolResponse] = None
    tool_outcome: Optional[Literal["created", "already_exists"]] = None
    link_report: Optional[LinkReportResponse] = None
    warnings: List[str] = Field(default_factory=list)
