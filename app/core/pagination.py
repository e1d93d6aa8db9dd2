"""
Search and pagination helpers shared by the list endpoints.
"""
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

# Keeps the row offset inside the 64-bit range every backend accepts
MAX_PAGE = 2**31


class ListQuery(BaseModel):
    """Search term and page number for a list request."""
    search: str | None = Field(None, description="Case-insensitive substring filter")
    page: int = Field(1, ge=1, le=MAX_PAGE, description="1-based page number")

    @property
    def term(self) -> str | None:
        """The search term, or None when blank."""
        if self.search is None:
            return None
        term = self.search.strip()
        return term or None


class Page(BaseModel, Generic[T]):
    """One page of a list result with the metadata needed to render pagination."""
    data: list[T]
    total: int
    per_page: int
    current_page: int
    last_page: int
    from_: int | None = Field(None, alias="from")
    to: int | None = None

    model_config = ConfigDict(populate_by_name=True)


async def paginate(db: AsyncSession, stmt: Select, page: int, per_page: int) -> tuple[list, dict]:
    """
    Run ``stmt`` for one page.
    
    Returns:
        The rows of the requested page and the pagination metadata
        (``total``, ``per_page``, ``current_page``, ``last_page``, ``from``, ``to``).
        A page past the end yields no rows.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    result = await db.execute(stmt.offset((page - 1) * per_page).limit(per_page))
    items = list(result.scalars().all())

    last_page = max((total + per_page - 1) // per_page, 1)
    first = (page - 1) * per_page + 1 if items else None
    meta = {
        "total": total,
        "per_page": per_page,
        "current_page": page,
        "last_page": last_page,
        "from": first,
        "to": first + len(items) - 1 if items else None,
    }
    return items, meta
