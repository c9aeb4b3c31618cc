"""
Toolhub Backend — Tag-Tool Linker
===================================

What:  Inserts tool_tags join rows for a tool, one tag at a time.
Who:   RequestService (approval), ToolService (admin create/update), seed script.

Per-tag policy:
    inserted                      → linked += 1
    unique violation, row exists  → already_linked += 1
    anything else                 → failed.append((tag, error)), keep going

Every insert runs in its own SAVEPOINT: one bad tag rolls back only its own
link, never the tool or the links before it. The caller decides what a
non-empty `failed` means; the approval workflow turns it into warnings.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag

logger = logging.getLogger(__name__)


@dataclass
class LinkFailure:
    """
    A tag that could not be linked.

    `tag_id` and `tag_name` are captured before the failed savepoint, so they
    stay readable even when a later rollback expires `tag`.
    """
    tag: Tag
    tag_id: uuid.UUID
    tag_name: str
    error: str


@dataclass
class LinkReport:
    linked: int = 0
    already_linked: int = 0
    failed: List[LinkFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


class TagLinker:

    async def link(self, db: AsyncSession, tool: Tool, tags: Iterable[Tag]) -> LinkReport:
        """
        Link `tags` to `tool`, best effort per tag.

        The same tag given twice is linked once. `tool.tags` is stale after this
        call; refresh it before reading.

        Returns:
            LinkReport with linked / already_linked counts and per-tag failures.
            Never raises for a single tag's failure.
        """
        report = LinkReport()
        tool_id = tool.id
        seen = set()

        for tag in tags:
            tag_id, tag_name = tag.id, tag.name
            if tag_id in seen:
                continue
            seen.add(tag_id)

            try:
                async with db.begin_nested():
                    await db.execute(insert(ToolTag).values(tool_id=tool_id, tag_id=tag_id))
                report.linked += 1
            except IntegrityError as e:
                if await self._is_linked(db, tool_id, tag_id):
                    report.already_linked += 1
                else:
                    logger.warning("Linking tag '%s' to tool %s failed: %s", tag_name, tool_id, str(e.orig))
                    report.failed.append(LinkFailure(tag, tag_id, tag_name, str(e.orig)))
            except SQLAlchemyError as e:
                logger.warning("Linking tag '%s' to tool %s failed: %s", tag_name, tool_id, str(e))
                report.failed.append(LinkFailure(tag, tag_id, tag_name, type(e).__name__))

        logger.info(
            "Linked tags to tool %s: linked=%d already_linked=%d failed=%d",
            tool_id, report.linked, report.already_linked, len(report.failed),
        )
        return report

    async def _is_linked(self, db: AsyncSession, tool_id: uuid.UUID, tag_id: uuid.UUID) -> bool:
        result = await db.execute(
            select(ToolTag.tool_id).where(
                ToolTag.tool_id == tool_id,
                ToolTag.tag_id == tag_id,
            )
        )
        return result.first() is not None


# ── Singleton Instance ────────────────────────────────────────────────────
tag_linker = TagLinker()
