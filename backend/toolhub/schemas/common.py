"""
Toolhub Backend — Shared API Schemas
======================================

What:  Pagination metadata, error body and health payloads used by every router.
Why:   Offset pagination is shared by tools, tags, requests and users; the
       arithmetic lives here once instead of in each service.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    """
    What:  Page metadata returned next to every list.

    Arithmetic:
        offset      = (page - 1) * limit
        total_pages = ceil(total_items / limit)   (0 when there are no items)
    """
    current_page: int = Field(ge=1, description="1-based page number")
    items_per_page: int = Field(ge=1, description="Page size used for this response")
    total_items: int = Field(ge=0, description="Number of rows matching the filters")
    total_pages: int = Field(ge=0, description="Number of pages at this page size")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(
            current_page=page,
            items_per_page=limit,
            total_items=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


def page_offset(page: int, limit: int) -> int:
    """Row offset of the first item on a 1-based page."""
    return (page - 1) * limit


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_transition",
            "message": "Cannot change request status from 'approved' to 'approved'...",
            "details": {"current_status": "approved", "target_status": "approved"},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
