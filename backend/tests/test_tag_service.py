"""
Toolhub Backend — Tag Service Tests
=====================================

What we test:
    ✅ Names are normalized on create and rename
    ✅ Duplicate names (any case) conflict
    ✅ Tags in use cannot be deleted, unused ones can
"""

import uuid

import pytest

from conftest import count_of
from toolhub.exceptions import ConflictError, NotFoundError, ValidationError
from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag
from toolhub.schemas.tag import TagCreate, TagUpdate
from toolhub.services.tag_service import TagService


@pytest.fixture
def service():
    return TagService()


class TestTagService:

    @pytest.mark.asyncio
    async def test_create_normalizes_name(self, db_session, service):
        tag = await service.create_tag(db_session, TagCreate(name="  Machine  Learning "))

        assert tag.name == "machine learning"

    @pytest.mark.asyncio
    async def test_create_duplicate_in_other_case(self, db_session, service):
        await service.create_tag(db_session, TagCreate(name="ai"))

        with pytest.raises(ConflictError):
            await service.create_tag(db_session, TagCreate(name="AI"))
        assert await count_of(db_session, Tag) == 1

    @pytest.mark.asyncio
    async def test_create_blank_name(self, db_session, service):
        with pytest.raises(ValidationError):
            await service.create_tag(db_session, TagCreate(name="   "))

    @pytest.mark.asyncio
    async def test_list_ordered_and_searchable(self, db_session, service):
        for name in ("video", "ai", "audio"):
            await service.create_tag(db_session, TagCreate(name=name))

        everything = await service.list_tags(db_session)
        matching = await service.list_tags(db_session, search="A")

        assert [t.name for t in everything.data] == ["ai", "audio", "video"]
        assert [t.name for t in matching.data] == ["ai", "audio"]

    @pytest.mark.asyncio
    async def test_rename(self, db_session, service):
        tag = await service.create_tag(db_session, TagCreate(name="ml"))

        renamed = await service.update_tag(
            db_session, tag.id, TagUpdate(name="Machine Learning", description="Models")
        )

        assert renamed.name == "machine learning"
        assert renamed.description == "Models"

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name(self, db_session, service):
        await service.create_tag(db_session, TagCreate(name="ai"))
        other = await service.create_tag(db_session, TagCreate(name="ml"))

        with pytest.raises(ConflictError):
            await service.update_tag(db_session, other.id, TagUpdate(name="AI"))

    @pytest.mark.asyncio
    async def test_delete_unused(self, db_session, service):
        tag = await service.create_tag(db_session, TagCreate(name="ai"))

        await service.delete_tag(db_session, tag.id)

        assert await count_of(db_session, Tag) == 0

    @pytest.mark.asyncio
    async def test_delete_in_use(self, db_session, service):
        tag = await service.create_tag(db_session, TagCreate(name="ai"))
        tool = Tool(name="Foo", url="https://foo.dev")
        db_session.add(tool)
        await db_session.flush()
        db_session.add(ToolTag(tool_id=tool.id, tag_id=tag.id))
        await db_session.flush()

        with pytest.raises(ConflictError) as exc_info:
            await service.delete_tag(db_session, tag.id)
        assert exc_info.value.context["tool_count"] == 1
        assert await count_of(db_session, Tag) == 1

    @pytest.mark.asyncio
    async def test_get_unknown(self, db_session, service):
        with pytest.raises(NotFoundError):
            await service.get_tag(db_session, uuid.uuid4())
