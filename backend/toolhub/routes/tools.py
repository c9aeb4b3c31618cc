"""
Toolhub Backend — Public Catalog Routes
=========================================

What:  GET /api/tools (browse/search/filter) and GET /api/tools/{id}.
Who:   The directory front page and tool detail page.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.config import settings
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse
from toolhub.schemas.tool import ToolListResponse, ToolResponse
from toolhub.services.tool_service import tool_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tools"])


@router.get(
    "/tools",
    response_model=ToolListResponse,
    responses={
        400: {"description": "Invalid paging parameters", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List catalog tools",
    description=(
        "Returns one page of tools ordered by name. `q` searches name and description "
        "(case-insensitive substring); `tag` keeps only tools carrying that tag."
    ),
)
async def list_tools(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size,
        description="Items per page",
    ),
    q: str | None = Query(default=None, max_length=200, description="Search text"),
    tag: str | None = Query(default=None, max_length=50, description="Tag name filter"),
    db: AsyncSession = Depends(get_db_session),
) -> ToolListResponse:
    result = await tool_service.list_tools(db=db, page=page, limit=limit, q=q, tag=tag)

    # Same convention as the other list endpoints: total also in a header
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return result


@router.get(
    "/tools/{tool_id}",
    response_model=ToolResponse,
    responses={
        404: {"description": "Tool not found", "model": ErrorResponse},
    },
    summary="Get a single tool",
)
async def get_tool(
    tool_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ToolResponse:
    tool = await tool_service.get_tool(db=db, tool_id=tool_id)
    return ToolResponse.model_validate(tool)
