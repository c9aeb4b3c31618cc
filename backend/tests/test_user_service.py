"""
Toolhub Backend — User Service Tests
======================================
"""

import uuid

import pytest

from toolhub.exceptions import ConflictError, NotFoundError
from toolhub.models.user import UserRole
from toolhub.schemas.user import UserCreate
from toolhub.services.user_service import UserService


@pytest.fixture
def service():
    return UserService()


class TestUserService:

    @pytest.mark.asyncio
    async def test_create_lowercases_email(self, db_session, service):
        user = await service.create_user(db_session, UserCreate(email="  Ada@Example.COM "))

        assert user.email == "ada@example.com"
        assert user.role == "user"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session, service):
        await service.create_user(db_session, UserCreate(email="ada@example.com"))

        with pytest.raises(ConflictError):
            await service.create_user(db_session, UserCreate(email="ADA@example.com"))

    @pytest.mark.asyncio
    async def test_update_role(self, db_session, service):
        user = await service.create_user(db_session, UserCreate(email="ada@example.com"))

        updated = await service.update_role(db_session, user.id, UserRole.EDITOR)

        assert updated.role == "editor"

    @pytest.mark.asyncio
    async def test_list_ordered_by_email(self, db_session, service):
        for email in ("zoe@example.com", "ada@example.com"):
            await service.create_user(db_session, UserCreate(email=email))

        page = await service.list_users(db_session)

        assert [u.email for u in page.data] == ["ada@example.com", "zoe@example.com"]
        assert page.data[0].role is UserRole.USER

    @pytest.mark.asyncio
    async def test_delete(self, db_session, service):
        user = await service.create_user(db_session, UserCreate(email="ada@example.com"))
        user_id = user.id

        await service.delete_user(db_session, user_id)

        with pytest.raises(NotFoundError):
            await service.get_user(db_session, user_id)
