"""
Toolhub Backend — Tag Service
===============================

What:  Tag listing for the catalog filters and admin tag management.
How:   Names go through normalize_tag_name before every lookup or write, so
       "AI", "ai" and " ai " always hit the same row.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from toolhub.models.tag import Tag
from toolhub.models.tool import ToolTag
from toolhub.schemas.common import PaginationMeta, page_offset
from toolhub.schemas.tag import TagCreate, TagListResponse, TagResponse, TagUpdate
from toolhub.services.pagination import check_page_params, count_rows, like_pattern
from toolhub.services.tag_parsing import normalize_tag_name

logger = logging.getLogger(__name__)


class TagService:

    async def list_tags(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> TagListResponse:
        """Tags ordered by name, optionally filtered by a name substring."""
        check_page_params(page, limit)

        query = select(Tag)
        if search and search.strip():
            query = query.where(Tag.name.ilike(like_pattern(search.strip()), escape="\\"))

        try:
            total = await count_rows(db, query)
            result = await db.execute(
                query.order_by(Tag.name).offset(page_offset(page, limit)).limit(limit)
            )
            tags = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Listing tags failed: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve tags. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return TagListResponse(
            data=[TagResponse.model_validate(t) for t in tags],
            pagination=PaginationMeta.build(page, limit, total),
        )

    async def get_tag(self, db: AsyncSession, tag_id: UUID) -> Tag:
        try:
            tag = await db.get(Tag, tag_id)
        except SQLAlchemyError as e:
            logger.error("Loading tag %s failed: %s", tag_id, str(e))
            raise PersistenceError(context={"tag_id": str(tag_id)})
        if tag is None:
            raise NotFoundError(resource="tag", resource_id=str(tag_id))
        return tag

    async def create_tag(self, db: AsyncSession, data: TagCreate) -> Tag:
        """
        Raises:
            ValidationError: Name is blank after normalization
            ConflictError: A tag with the same normalized name exists
        """
        name = self._clean_name(data.name)
        await self._ensure_name_free(db, name)

        tag = Tag(name=name, description=data.description)
        try:
            async with db.begin_nested():
                db.add(tag)
        except IntegrityError:
            raise ConflictError(message=f"Tag '{name}' already exists.", context={"name": name})
        except SQLAlchemyError as e:
            logger.error("Creating tag '%s' failed: %s", name, str(e), exc_info=True)
            raise PersistenceError(context={"name": name})

        logger.info("Tag '%s' created (%s)", name, tag.id)
        return tag

    async def update_tag(self, db: AsyncSession, tag_id: UUID, data: TagUpdate) -> Tag:
        """
        Rename a tag and/or change its description.

        Raises:
            ValidationError: Empty update or blank name
            NotFoundError: Unknown tag
            ConflictError: The new name belongs to another tag
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No changes provided")

        tag = await self.get_tag(db, tag_id)

        if "name" in changes:
            name = self._clean_name(changes["name"] or "")
            if name != tag.name:
                await self._ensure_name_free(db, name)
                tag.name = name
        new_name = tag.name
        if "description" in changes:
            tag.description = changes["description"]

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message=f"Tag '{new_name}' already exists.", context={"name": new_name})
        except SQLAlchemyError as e:
            logger.error("Updating tag %s failed: %s", tag_id, str(e), exc_info=True)
            raise PersistenceError(context={"tag_id": str(tag_id)})

        logger.info("Tag %s updated: %s", tag_id, sorted(changes))
        return tag

    async def delete_tag(self, db: AsyncSession, tag_id: UUID) -> None:
        """
        Raises:
            NotFoundError: Unknown tag
            ConflictError: One or more tools still carry the tag
        """
        tag = await self.get_tag(db, tag_id)
        tag_name = tag.name

        try:
            result = await db.execute(
                select(func.count()).select_from(ToolTag).where(ToolTag.tag_id == tag.id)
            )
            in_use = result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Checking usage of tag %s failed: %s", tag_id, str(e))
            raise PersistenceError(context={"tag_id": str(tag_id)})

        if in_use:
            raise ConflictError(
                message=f"Tag '{tag_name}' is used by {in_use} tool(s) and cannot be deleted.",
                context={"tag_id": str(tag_id), "tool_count": in_use},
            )

        try:
            async with db.begin_nested():
                await db.delete(tag)
        except IntegrityError:
            # Linked by a concurrent writer after the usage check
            raise ConflictError(
                message=f"Tag '{tag_name}' is in use and cannot be deleted.",
                context={"tag_id": str(tag_id)},
            )
        except SQLAlchemyError as e:
            logger.error("Deleting tag %s failed: %s", tag_id, str(e), exc_info=True)
            raise PersistenceError(context={"tag_id": str(tag_id)})

        logger.info("Tag %s deleted", tag_id)

    def _clean_name(self, raw: str) -> str:
        name = normalize_tag_name(raw)
        if not name:
            raise ValidationError(message="Tag name cannot be empty", field="name")
        return name

    async def _ensure_name_free(self, db: AsyncSession, name: str) -> None:
        try:
            result = await db.execute(select(Tag.id).where(Tag.name == name))
            taken = result.first() is not None
        except SQLAlchemyError as e:
            logger.error("Tag lookup failed: %s", str(e))
            raise PersistenceError(context={"name": name})
        if taken:
            raise ConflictError(message=f"Tag '{name}' already exists.", context={"name": name})


# ── Singleton Instance ────────────────────────────────────────────────────
tag_service = TagService()
