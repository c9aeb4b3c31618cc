"""
Toolhub Backend — User Service
================================

What:  Admin management of directory users and their roles.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import ConflictError, NotFoundError, PersistenceError
from toolhub.models.user import User, UserRole
from toolhub.schemas.common import PaginationMeta, page_offset
from toolhub.schemas.user import UserCreate, UserListResponse, UserResponse
from toolhub.services.pagination import check_page_params, count_rows

logger = logging.getLogger(__name__)


class UserService:

    async def list_users(self, db: AsyncSession, page: int = 1, limit: int = 10) -> UserListResponse:
        check_page_params(page, limit)
        query = select(User)
        try:
            total = await count_rows(db, query)
            result = await db.execute(
                query.order_by(User.email).offset(page_offset(page, limit)).limit(limit)
            )
            users = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Listing users failed: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return UserListResponse(
            data=[UserResponse.model_validate(u) for u in users],
            pagination=PaginationMeta.build(page, limit, total),
        )

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Loading user %s failed: %s", user_id, str(e))
            raise PersistenceError(context={"user_id": str(user_id)})
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        """
        Raises:
            ConflictError: The email is already registered
        """
        email = data.email.strip().lower()
        try:
            result = await db.execute(select(User.id).where(User.email == email))
            taken = result.first() is not None
        except SQLAlchemyError as e:
            logger.error("User lookup failed: %s", str(e))
            raise PersistenceError(context={"error_type": type(e).__name__})
        if taken:
            raise ConflictError(message="A user with this email already exists.", context={"email": email})

        user = User(email=email, role=UserRole(data.role).value)
        try:
            async with db.begin_nested():
                db.add(user)
        except IntegrityError:
            raise ConflictError(message="A user with this email already exists.", context={"email": email})
        except SQLAlchemyError as e:
            logger.error("Creating user failed: %s", str(e), exc_info=True)
            raise PersistenceError(context={"error_type": type(e).__name__})

        logger.info("User %s created with role %s", user.id, user.role)
        return user

    async def update_role(self, db: AsyncSession, user_id: UUID, role: UserRole) -> User:
        user = await self.get_user(db, user_id)
        user.role = UserRole(role).value
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Updating role of user %s failed: %s", user_id, str(e))
            raise PersistenceError(context={"user_id": str(user_id)})
        logger.info("User %s role set to %s", user_id, user.role)
        return user

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        user = await self.get_user(db, user_id)
        try:
            await db.delete(user)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting user %s failed: %s", user_id, str(e))
            raise PersistenceError(context={"user_id": str(user_id)})
        logger.info("User %s deleted", user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
