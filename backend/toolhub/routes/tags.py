"""
Toolhub Backend — Public Tag Routes
=====================================

What:  GET /api/tags, feeding the catalog's tag filter and the suggestion form.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.config import settings
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse
from toolhub.schemas.tag import TagListResponse
from toolhub.services.tag_service import tag_service

router = APIRouter(prefix="/api", tags=["Tags"])


@router.get(
    "/tags",
    response_model=TagListResponse,
    responses={400: {"description": "Invalid paging parameters", "model": ErrorResponse}},
    summary="List tags",
)
async def list_tags(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str | None = Query(default=None, max_length=50, description="Name substring"),
    db: AsyncSession = Depends(get_db_session),
) -> TagListResponse:
    result = await tag_service.list_tags(db=db, page=page, limit=limit, search=search)
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return result
