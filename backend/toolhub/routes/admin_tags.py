"""
Toolhub Backend — Admin Tag Routes
====================================

    POST   /api/admin/tags           create (409 on a duplicate name, any case)
    PUT    /api/admin/tags/{id}      rename / change description
    DELETE /api/admin/tags/{id}      delete (409 while any tool uses it)
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.auth import require_admin
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse, MessageResponse
from toolhub.schemas.tag import TagCreate, TagResponse, TagUpdate
from toolhub.services.tag_service import tag_service

router = APIRouter(
    prefix="/api/admin/tags",
    tags=["Admin: Tags"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or invalid admin key", "model": ErrorResponse}},
)


@router.post(
    "",
    status_code=201,
    response_model=TagResponse,
    responses={409: {"description": "Tag already exists", "model": ErrorResponse}},
    summary="Create a tag",
)
async def create_tag(
    payload: TagCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.create_tag(db=db, data=payload)
    return TagResponse.model_validate(tag)


@router.put(
    "/{tag_id}",
    response_model=TagResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update a tag",
)
async def update_tag(
    tag_id: UUID,
    payload: TagUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.update_tag(db=db, tag_id=tag_id, data=payload)
    return TagResponse.model_validate(tag)


@router.delete(
    "/{tag_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"description": "Tag in use", "model": ErrorResponse}},
    summary="Delete a tag",
)
async def delete_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete_tag(db=db, tag_id=tag_id)
    return MessageResponse(message="Tag deleted")
