"""
Toolhub Backend — Admin Tool Routes
=====================================

    POST   /api/admin/tools          create (tags created on demand)
    PUT    /api/admin/tools/{id}     partial update; `tags` replaces the tag set
    DELETE /api/admin/tools/{id}     delete (join rows go with it)
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.auth import require_admin
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse, MessageResponse
from toolhub.schemas.tool import ToolCreate, ToolResponse, ToolUpdate
from toolhub.services.tool_service import tool_service

router = APIRouter(
    prefix="/api/admin/tools",
    tags=["Admin: Tools"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or invalid admin key", "model": ErrorResponse}},
)


@router.post(
    "",
    status_code=201,
    response_model=ToolResponse,
    responses={409: {"description": "URL already listed", "model": ErrorResponse}},
    summary="Create a tool",
)
async def create_tool(
    payload: ToolCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ToolResponse:
    tool = await tool_service.create_tool(db=db, data=payload)
    return ToolResponse.model_validate(tool)


@router.put(
    "/{tool_id}",
    response_model=ToolResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update a tool",
)
async def update_tool(
    tool_id: UUID,
    payload: ToolUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ToolResponse:
    tool = await tool_service.update_tool(db=db, tool_id=tool_id, data=payload)
    return ToolResponse.model_validate(tool)


@router.delete(
    "/{tool_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a tool",
)
async def delete_tool(
    tool_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tool_service.delete_tool(db=db, tool_id=tool_id)
    return MessageResponse(message="Tool deleted")
