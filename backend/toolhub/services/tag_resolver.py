"""
Toolhub Backend — Tag Resolver
================================

What:  Maps tag names to Tag rows, creating the ones that do not exist yet.
Who:   RequestService (approval), ToolService (admin create/update), seed script.
When:  Whenever tag names coming from users have to become join rows.

Resolution Flow:
    names ──normalize──▶ unique names ──SELECT──▶ found
                                         │
                                         └─ missing ──INSERT (savepoint)──▶ created
                                                           │
                                                     unique violation
                                                           │
                                                           ▼
                                                 re-SELECT (someone else
                                                 created it meanwhile)

Concurrency:
    Two approvals introducing the same new tag both miss it on the first
    SELECT. The loser's INSERT hits the UNIQUE constraint on tags.name; that
    is not an error here, the row it wanted now exists and is re-fetched.
    Each INSERT runs in its own SAVEPOINT so the violation does not poison the
    surrounding transaction.
"""

import logging
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import PersistenceError
from toolhub.models.tag import Tag
from toolhub.services.tag_parsing import normalize_tag_name

logger = logging.getLogger(__name__)


class TagResolver:
    """Find-or-create for tags, safe against concurrent creators."""

    async def resolve(self, db: AsyncSession, names: Iterable[str]) -> Dict[str, Tag]:
        """
        Resolve every name to its Tag.

        Args:
            db: Async database session (the caller's unit of work)
            names: Raw tag names; case and whitespace variants collapse to one tag

        Returns:
            Mapping from each input name (as given) to its Tag. Names that
            normalize to an empty string are left out.

        Raises:
            PersistenceError: The store failed for a reason other than a
                              concurrent duplicate insert
        """
        names = list(names)
        normalized = {name: normalize_tag_name(name) for name in names}
        wanted: List[str] = []
        for value in normalized.values():
            if value and value not in wanted:
                wanted.append(value)

        if not wanted:
            return {}

        try:
            by_name = await self._fetch_existing(db, wanted)

            for tag_name in wanted:
                if tag_name not in by_name:
                    by_name[tag_name] = await self._create(db, tag_name)

        except PersistenceError:
            raise
        except SQLAlchemyError as e:
            logger.error("Tag resolution failed for %s: %s", wanted, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not resolve tags. Please try again.",
                context={"tags": wanted, "error_type": type(e).__name__},
            )

        return {
            name: by_name[value]
            for name, value in normalized.items()
            if value
        }

    async def _fetch_existing(self, db: AsyncSession, names: List[str]) -> Dict[str, Tag]:
        result = await db.execute(select(Tag).where(Tag.name.in_(names)))
        return {tag.name: tag for tag in result.scalars().all()}

    async def _create(self, db: AsyncSession, name: str) -> Tag:
        tag = Tag(name=name)
        try:
            async with db.begin_nested():
                db.add(tag)
            logger.info("Created tag '%s' (%s)", name, tag.id)
            return tag
        except IntegrityError:
            # Lost a race with another creator; the savepoint is already rolled back
            logger.info("Tag '%s' was created concurrently, re-fetching", name)

        existing = await self._fetch_existing(db, [name])
        if name not in existing:
            raise PersistenceError(
                message="Could not create tag. Please try again.",
                context={"tag": name},
            )
        return existing[name]


# ── Singleton Instance ────────────────────────────────────────────────────
tag_resolver = TagResolver()
