"""
Toolhub Backend — ORM Models
==============================

Importing this package registers every table with Base.metadata
(Alembic autogenerate and the test fixtures rely on that).
"""

from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag
from toolhub.models.tool_request import RequestStatus, ToolRequest
from toolhub.models.user import User, UserRole

__all__ = [
    "Tag",
    "Tool",
    "ToolTag",
    "ToolRequest",
    "RequestStatus",
    "User",
    "UserRole",
]
