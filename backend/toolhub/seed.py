"""
Toolhub Backend — Starter Data
================================

What:  Loads the starter tags and tools into an empty (or partly seeded) database.
How:   Goes through the same TagResolver / TagLinker as approvals, so running it
       twice changes nothing: existing tags are reused, tools are matched by URL
       and existing links count as already linked.

Usage:
    python -m toolhub.seed                  # after `alembic upgrade head`
    python -m toolhub.seed --create-tables  # local SQLite without migrations
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.config import settings
from toolhub.database import Base, async_session_factory, dispose_engine, engine
from toolhub.models.tool import Tool
from toolhub.services.tag_linker import tag_linker
from toolhub.services.tag_resolver import tag_resolver

logger = logging.getLogger(__name__)

SEED_TAGS = {
    "Productivity": "Tools that help you get things done more efficiently.",
    "Development": "Tools for software developers and engineers.",
    "AI": "Tools powered by Artificial Intelligence.",
    "Design": "Tools for graphic and UI/UX design.",
    "Marketing": "Tools for marketing and sales professionals.",
    "Utilities": "General purpose utility tools.",
    "Research": "Tools for academic and scientific research.",
    "Collaboration": "Tools for team communication and project management.",
}

SEED_TOOLS = [
    {
        "name": "Notion",
        "url": "https://notion.so",
        "description": "The all-in-one workspace for your notes, tasks, wikis, and databases.",
        "tags": ["Productivity", "Collaboration"],
    },
    {
        "name": "Figma",
        "url": "https://figma.com",
        "description": "A collaborative interface design tool.",
        "tags": ["Design", "Collaboration"],
    },
    {
        "name": "GitHub Copilot",
        "url": "https://copilot.github.com/",
        "description": (
            "Your AI pair programmer. Get suggestions for whole lines or entire "
            "functions right in your editor."
        ),
        "tags": ["Development", "AI"],
    },
    {
        "name": "ChatGPT",
        "url": "https://chat.openai.com",
        "description": "A conversational AI model by OpenAI that can generate human-like text.",
        "tags": ["AI", "Productivity", "Research"],
    },
    {
        "name": "Google Analytics",
        "url": "https://analytics.google.com/",
        "description": "Web analytics service that tracks and reports website traffic.",
        "tags": ["Marketing", "Utilities"],
    },
]


@dataclass
class SeedSummary:
    tools_created: int = 0
    tools_existing: int = 0
    links_created: int = 0
    link_failures: int = 0


async def seed_database(db: AsyncSession) -> SeedSummary:
    """Insert whatever part of the starter data is missing. Flushes, never commits."""
    summary = SeedSummary()

    tags = await tag_resolver.resolve(db, SEED_TAGS.keys())
    for name, description in SEED_TAGS.items():
        if tags[name].description is None:
            tags[name].description = description

    for entry in SEED_TOOLS:
        result = await db.execute(select(Tool).where(Tool.url == entry["url"]))
        tool = result.scalar_one_or_none()
        if tool is None:
            tool = Tool(name=entry["name"], url=entry["url"], description=entry["description"])
            db.add(tool)
            await db.flush()
            summary.tools_created += 1
        else:
            summary.tools_existing += 1

        report = await tag_linker.link(db, tool, [tags[name] for name in entry["tags"]])
        summary.links_created += report.linked
        summary.link_failures += len(report.failed)

    await db.flush()
    return summary


async def main(create_tables: bool = False) -> SeedSummary:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        try:
            summary = await seed_database(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    await dispose_engine()
    logger.info(
        "Seed complete: %d tools created, %d already present, %d links created, %d link failures",
        summary.tools_created, summary.tools_existing, summary.links_created, summary.link_failures,
    )
    return summary


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load Toolhub starter data")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (for local SQLite without Alembic)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )
    asyncio.run(main(create_tables=args.create_tables))
