"""
Offset pagination helpers shared by the list operations.
"""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.config import settings
from toolhub.exceptions import ValidationError


def check_page_params(page: int, limit: int) -> None:
    """Reject pages below 1 and limits outside 1..MAX_PAGE_SIZE."""
    if page < 1:
        raise ValidationError(message="page must be 1 or greater", field="page")
    if limit < 1 or limit > settings.max_page_size:
        raise ValidationError(
            message=f"limit must be between 1 and {settings.max_page_size}",
            field="limit",
        )


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with %, _ and the escape character escaped (escape='\\')."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def count_rows(db: AsyncSession, query: Select) -> int:
    """COUNT(*) over a filtered query, ignoring its ordering and paging."""
    subquery = query.order_by(None).limit(None).offset(None).subquery()
    result = await db.execute(select(func.count()).select_from(subquery))
    return result.scalar_one()
