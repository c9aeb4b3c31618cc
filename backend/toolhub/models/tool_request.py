"""
Toolhub Backend — Tool Request Model
======================================

What:  ORM model for `tool_requests`, user-submitted suggestions awaiting review.
Who:   RequestService (submission, listing, the approval state machine).

Lifecycle:
    pending ──approve──▶ approved   (materializes a Tool)
       │
       └────deny───────▶ denied
    approved and denied are terminal; nothing leaves them.

Table Design:
    - tags: JSON, holding the raw tag names exactly as submitted. New rows
      always store a list; rows imported from the previous store may hold a
      comma-joined string or a PostgreSQL array literal ("{a,b}").
      toolhub.services.tag_parsing reads all three shapes.
    - status: short enum-like VARCHAR, indexed with created_at for the admin
      review queue (WHERE status = 'pending' ORDER BY created_at DESC).
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from toolhub.database import Base


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolRequest(Base):
    """A suggestion for a new catalog tool."""

    __tablename__ = "tool_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    # List[str] for new rows; str for legacy rows (see module docstring)
    tags: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=None)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RequestStatus.PENDING.value,
        server_default=RequestStatus.PENDING.value,
        comment="Review state: pending, approved, denied",
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

    __table_args__ = (
        Index("idx_tool_requests_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ToolRequest(id={self.id}, status='{self.status}', url='{self.url}')>"
