"""
Toolhub Backend — Starter Data Tests
======================================
"""

import pytest
from sqlalchemy import select

from conftest import count_of
from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag
from toolhub.seed import SEED_TAGS, SEED_TOOLS, seed_database


class TestSeed:

    @pytest.mark.asyncio
    async def test_seeds_empty_database(self, db_session):
        summary = await seed_database(db_session)

        assert summary.tools_created == len(SEED_TOOLS)
        assert summary.links_created == sum(len(t["tags"]) for t in SEED_TOOLS)
        assert summary.link_failures == 0
        assert await count_of(db_session, Tag) == len(SEED_TAGS)

        result = await db_session.execute(select(Tag).where(Tag.name == "ai"))
        assert result.scalar_one().description == SEED_TAGS["AI"]

    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, db_session):
        await seed_database(db_session)

        summary = await seed_database(db_session)

        assert summary.tools_created == 0
        assert summary.tools_existing == len(SEED_TOOLS)
        assert summary.links_created == 0
        assert await count_of(db_session, Tool) == len(SEED_TOOLS)
        assert await count_of(db_session, ToolTag) == sum(len(t["tags"]) for t in SEED_TOOLS)

    @pytest.mark.asyncio
    async def test_keeps_existing_tag_description(self, db_session):
        db_session.add(Tag(name="ai", description="Curated by hand"))
        await db_session.flush()

        await seed_database(db_session)

        result = await db_session.execute(select(Tag).where(Tag.name == "ai"))
        assert result.scalar_one().description == "Curated by hand"
