"""
Toolhub Backend — Tool Materializer
=====================================

What:  Converts an approved tool request into a catalog Tool.
Who:   RequestService.transition, only for approvals.

Outcomes:
    CREATED         a new tools row copying name/description/url
    ALREADY_EXISTS  a tool with the same URL is already listed; it is returned
                    untouched. This is a normal result, not a failure.

    ValidationError   empty name or URL (the request bypassed submission checks)
    PersistenceError  any other store failure; the approval must be aborted

Tool URLs are compared by exact string equality, which is what the UNIQUE
constraint on tools.url enforces.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import PersistenceError, ValidationError
from toolhub.models.tool import Tool
from toolhub.models.tool_request import ToolRequest

logger = logging.getLogger(__name__)


class MaterializeOutcome(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass
class MaterializedTool:
    tool: Tool
    outcome: MaterializeOutcome

    @property
    def created(self) -> bool:
        return self.outcome is MaterializeOutcome.CREATED


class ToolMaterializer:

    async def materialize(self, db: AsyncSession, request: ToolRequest) -> MaterializedTool:
        """
        Return the catalog tool for `request.url`, inserting it when missing.

        Raises:
            ValidationError: Request name or URL is empty
            PersistenceError: Store failure while looking up or inserting
        """
        name = (request.name or "").strip()
        url = (request.url or "").strip()
        if not name:
            raise ValidationError(message="Tool name cannot be empty", field="name")
        if not url:
            raise ValidationError(message="Tool URL cannot be empty", field="url")

        try:
            existing = await self._find_by_url(db, url)
            if existing is not None:
                logger.info("Tool for %s already exists (%s), skipping insert", url, existing.id)
                return MaterializedTool(existing, MaterializeOutcome.ALREADY_EXISTS)

            tool = Tool(name=name, description=request.description, url=url)
            try:
                async with db.begin_nested():
                    db.add(tool)
            except IntegrityError:
                # A concurrent approval inserted the same URL first
                existing = await self._find_by_url(db, url)
                if existing is None:
                    raise
                logger.info("Tool for %s was created concurrently (%s)", url, existing.id)
                return MaterializedTool(existing, MaterializeOutcome.ALREADY_EXISTS)

        except SQLAlchemyError as e:
            logger.error("Materializing tool for %s failed: %s", url, str(e), exc_info=True)
            raise PersistenceError(
                message="Could not create the tool for this request. Please try again.",
                context={"url": url, "error_type": type(e).__name__},
            )

        logger.info("Created tool '%s' (%s) from request %s", tool.name, tool.id, request.id)
        return MaterializedTool(tool, MaterializeOutcome.CREATED)

    async def _find_by_url(self, db: AsyncSession, url: str) -> Optional[Tool]:
        result = await db.execute(select(Tool).where(Tool.url == url))
        return result.scalar_one_or_none()


# ── Singleton Instance ────────────────────────────────────────────────────
tool_materializer = ToolMaterializer()
