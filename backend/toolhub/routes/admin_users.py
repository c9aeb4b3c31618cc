"""
Toolhub Backend — Admin User Routes
=====================================

    GET    /api/admin/users          list
    POST   /api/admin/users          register an email with a role
    PATCH  /api/admin/users/{id}     change role
    DELETE /api/admin/users/{id}     remove
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.auth import require_admin
from toolhub.config import settings
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse, MessageResponse
from toolhub.schemas.user import UserCreate, UserListResponse, UserResponse, UserRoleUpdate
from toolhub.services.user_service import user_service

router = APIRouter(
    prefix="/api/admin/users",
    tags=["Admin: Users"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or invalid admin key", "model": ErrorResponse}},
)


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    result = await user_service.list_users(db=db, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return result


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.create_user(db=db, data=payload)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Change a user's role",
)
async def update_user_role(
    user_id: UUID,
    payload: UserRoleUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.update_role(db=db, user_id=user_id, role=payload.role)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a user",
)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.delete_user(db=db, user_id=user_id)
    return MessageResponse(message="User deleted")
