"""
Toolhub Backend — Tool and ToolTag Models
===========================================

What:  ORM models for the `tools` catalog table and the `tool_tags` join table.
Who:   ToolMaterializer (approval), ToolService (admin CRUD, public listing),
       TagLinker (join rows).

Table Design:
    tools
        - url: UNIQUE. A tool URL is never inserted twice; approving a request
          whose URL is already listed is a no-op for the catalog.
        - updated_at: refreshed by the ORM on every update.
    tool_tags
        - (tool_id, tag_id) composite primary key: a duplicate link is a
          unique violation, which the linker treats as "already linked".
        - tool_id ON DELETE CASCADE: deleting a tool removes its links.
        - tag_id ON DELETE RESTRICT: a tag in use cannot be deleted.

Tool.tags is a read-only view over tool_tags (loaded with selectin so it is
available in async code). Links are written exclusively through ToolTag rows
by TagLinker / ToolService, so after linking the caller refreshes `tags`.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toolhub.database import Base
from toolhub.models.tag import Tag

TOOL_NAME_MAX_LENGTH = 100
TOOL_URL_MAX_LENGTH = 2048


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolTag(Base):
    """Association between a tool and a tag."""

    __tablename__ = "tool_tags"

    tool_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tools.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tags.id", ondelete="RESTRICT"),
        primary_key=True,
    )

    __table_args__ = (
        Index("idx_tool_tags_tag_id", "tag_id"),
    )

    def __repr__(self) -> str:
        return f"<ToolTag(tool_id={self.tool_id}, tag_id={self.tag_id})>"


class Tool(Base):
    """
    A catalog entry for an AI product or service.

    Lifecycle:
        1. Created by an admin (ToolService.create_tool) or by approving a
           request (ToolMaterializer)
        2. Edited by admins: name/description/url and tag set
        3. Deleted by admins; join rows go with it
    """

    __tablename__ = "tools"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(TOOL_NAME_MAX_LENGTH),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    url: Mapped[str] = mapped_column(
        String(TOOL_URL_MAX_LENGTH),
        nullable=False,
        unique=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )

    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary="tool_tags",
        viewonly=True,
        lazy="selectin",
        order_by=Tag.name,
    )

    __table_args__ = (
        Index("idx_tools_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Tool(id={self.id}, name='{self.name}', url='{self.url}')>"
