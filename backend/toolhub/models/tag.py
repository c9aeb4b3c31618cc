"""
Toolhub Backend — Tag Model
=============================

What:  ORM model for the `tags` table (categorization labels shared by tools).
Who:   Created lazily by TagResolver during approval/tool edits, or directly by
       admins through TagService.

Table Design:
    - name: stored normalized (trimmed, whitespace-collapsed, lowercase) so the
      plain UNIQUE constraint is also a case-insensitive one. "AI", " ai " and
      "ai" are the same tag.
    - Never deleted while a tool references it: tool_tags.tag_id is
      ON DELETE RESTRICT and TagService checks usage first.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from toolhub.database import Base

TAG_NAME_MAX_LENGTH = 50


class Tag(Base):
    """A normalized, unique label attachable to many tools."""

    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(TAG_NAME_MAX_LENGTH),
        nullable=False,
        unique=True,
        comment="Normalized lowercase tag name",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
