"""
Toolhub Backend — Tool Service
================================

What:  Public catalog browsing and admin tool management.
Who:   GET /api/tools*, /api/admin/tools*.

Listing Query (defaults):
    SELECT * FROM tools
    WHERE (name ILIKE :q OR description ILIKE :q)            -- when q is given
      AND id IN (SELECT tool_id FROM tool_tags JOIN tags ... -- when tag is given
                 WHERE tags.name = :tag)
    ORDER BY name, id
    OFFSET (page - 1) * limit LIMIT limit
    → tags are loaded for the whole page with one extra SELECT (selectin)

Tag reconciliation (update_tool with `tags`):
    current = names linked now, requested = normalized names asked for
    removed = current - requested  → DELETE join rows
    added   = requested - current  → TagResolver + TagLinker (same path as approval)
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag
from toolhub.schemas.common import PaginationMeta, page_offset
from toolhub.schemas.tool import ToolCreate, ToolListResponse, ToolResponse, ToolUpdate
from toolhub.services.pagination import check_page_params, count_rows, like_pattern
from toolhub.services.tag_linker import LinkReport, tag_linker
from toolhub.services.tag_parsing import normalize_tag_name, parse_raw_tags
from toolhub.services.tag_resolver import tag_resolver

logger = logging.getLogger(__name__)


class ToolService:
    """
    Business logic for catalog tools.

    Error Handling Strategy:
        Lookups that find nothing raise NotFoundError; URL collisions raise
        ConflictError; unexpected SQLAlchemy errors are wrapped in
        PersistenceError so driver details never reach the client.
    """

    async def list_tools(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        q: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> ToolListResponse:
        """
        One page of the catalog, ordered by name.

        Args:
            db: Async database session
            page: 1-based page number
            limit: Page size (1..MAX_PAGE_SIZE)
            q: Case-insensitive substring matched against name and description
            tag: Only tools carrying this tag (any case/whitespace variant)

        Returns:
            ToolListResponse with the page of tools (tags included) and pagination
        """
        check_page_params(page, limit)

        query = select(Tool)
        if q and q.strip():
            pattern = like_pattern(q.strip())
            query = query.where(
                or_(
                    Tool.name.ilike(pattern, escape="\\"),
                    Tool.description.ilike(pattern, escape="\\"),
                )
            )
        if tag and normalize_tag_name(tag):
            tagged = (
                select(ToolTag.tool_id)
                .join(Tag, Tag.id == ToolTag.tag_id)
                .where(Tag.name == normalize_tag_name(tag))
            )
            query = query.where(Tool.id.in_(tagged))

        try:
            total = await count_rows(db, query)
            result = await db.execute(
                query.order_by(Tool.name, Tool.id)
                .offset(page_offset(page, limit))
                .limit(limit)
                .execution_options(populate_existing=True)
            )
            tools = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Listing tools failed: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve tools. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return ToolListResponse(
            data=[ToolResponse.model_validate(t) for t in tools],
            pagination=PaginationMeta.build(page, limit, total),
        )

    async def get_tool(self, db: AsyncSession, tool_id: UUID) -> Tool:
        """
        Raises:
            NotFoundError: No tool with this id (→ 404)
        """
        try:
            result = await db.execute(
                select(Tool)
                .where(Tool.id == tool_id)
                .execution_options(populate_existing=True)
            )
            tool = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Loading tool %s failed: %s", tool_id, str(e))
            raise PersistenceError(context={"tool_id": str(tool_id)})

        if tool is None:
            raise NotFoundError(resource="tool", resource_id=str(tool_id))
        return tool

    async def create_tool(self, db: AsyncSession, data: ToolCreate) -> Tool:
        """
        Admin insert of a tool, with tags created on demand.

        Raises:
            ConflictError: Another tool already uses this URL
            PersistenceError: Store failure
        """
        await self._ensure_url_free(db, data.url)

        tool = Tool(name=data.name, url=data.url, description=data.description)
        try:
            async with db.begin_nested():
                db.add(tool)
        except IntegrityError:
            raise ConflictError(
                message="A tool with this URL already exists.",
                context={"url": data.url},
            )
        except SQLAlchemyError as e:
            logger.error("Creating tool failed: %s", str(e), exc_info=True)
            raise PersistenceError(context={"error_type": type(e).__name__})

        if data.tags:
            await self._link_names(db, tool, data.tags)

        await self._reload_tags(db, tool)
        logger.info("Tool %s created by admin (%d tags)", tool.id, len(tool.tags))
        return tool

    async def update_tool(self, db: AsyncSession, tool_id: UUID, data: ToolUpdate) -> Tool:
        """
        Partial update; a `tags` list replaces the current tag set.

        Raises:
            ValidationError: Nothing to update, or a blank name
            NotFoundError: Unknown tool
            ConflictError: The new URL belongs to another tool
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No changes provided")

        tool = await self.get_tool(db, tool_id)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError(message="Tool name cannot be empty", field="name")
            tool.name = name
        if "url" in changes:
            if not changes["url"]:
                raise ValidationError(message="Tool URL cannot be empty", field="url")
            if changes["url"] != tool.url:
                await self._ensure_url_free(db, changes["url"])
                tool.url = changes["url"]
        if "description" in changes:
            tool.description = changes["description"]
        tool.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(
                message="A tool with this URL already exists.",
                context={"url": tool.url},
            )
        except SQLAlchemyError as e:
            logger.error("Updating tool %s failed: %s", tool_id, str(e), exc_info=True)
            raise PersistenceError(context={"tool_id": str(tool_id)})

        if changes.get("tags") is not None:
            await self._reconcile_tags(db, tool, changes["tags"])

        await self._reload_tags(db, tool)
        logger.info("Tool %s updated: %s", tool_id, sorted(changes))
        return tool

    async def delete_tool(self, db: AsyncSession, tool_id: UUID) -> None:
        tool = await self.get_tool(db, tool_id)
        try:
            await db.execute(delete(ToolTag).where(ToolTag.tool_id == tool.id))
            await db.delete(tool)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting tool %s failed: %s", tool_id, str(e), exc_info=True)
            raise PersistenceError(context={"tool_id": str(tool_id)})
        logger.info("Tool %s deleted", tool_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _ensure_url_free(self, db: AsyncSession, url: str) -> None:
        try:
            result = await db.execute(select(Tool.id).where(Tool.url == url))
            taken = result.first() is not None
        except SQLAlchemyError as e:
            logger.error("URL lookup failed: %s", str(e))
            raise PersistenceError(context={"error_type": type(e).__name__})
        if taken:
            raise ConflictError(
                message="A tool with this URL already exists.",
                context={"url": url},
            )

    async def _link_names(self, db: AsyncSession, tool: Tool, names: List[str]) -> LinkReport:
        resolved = await tag_resolver.resolve(db, names)
        report = await tag_linker.link(db, tool, resolved.values())
        if report.has_failures:
            logger.warning(
                "Tool %s: %d tag(s) could not be linked: %s",
                tool.id, len(report.failed), [f.tag_name for f in report.failed],
            )
        return report

    async def _reconcile_tags(self, db: AsyncSession, tool: Tool, names: List[str]) -> None:
        requested = parse_raw_tags(names)
        await self._reload_tags(db, tool)
        current = {tag.name: tag.id for tag in tool.tags}

        removed = [tag_id for name, tag_id in current.items() if name not in requested]
        added = [name for name in requested if name not in current]

        if removed:
            try:
                await db.execute(
                    delete(ToolTag).where(
                        ToolTag.tool_id == tool.id,
                        ToolTag.tag_id.in_(removed),
                    )
                )
            except SQLAlchemyError as e:
                logger.error("Unlinking tags from tool %s failed: %s", tool.id, str(e))
                raise PersistenceError(context={"tool_id": str(tool.id)})
        if added:
            await self._link_names(db, tool, added)

        logger.info("Tool %s tags reconciled: +%d -%d", tool.id, len(added), len(removed))

    async def _reload_tags(self, db: AsyncSession, tool: Tool) -> None:
        try:
            await db.refresh(tool, attribute_names=["tags"])
        except SQLAlchemyError as e:
            logger.error("Reloading tags of tool %s failed: %s", tool.id, str(e))
            raise PersistenceError(context={"tool_id": str(tool.id)})


# ── Singleton Instance ────────────────────────────────────────────────────
tool_service = ToolService()
