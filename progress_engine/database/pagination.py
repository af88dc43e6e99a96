from typing import TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class Paginator:
    """Offset pagination over a select statement."""

    def __init__(self, page: int = 1, limit: int = 20, max_limit: int = 100) -> None:
        self.page = max(page, 1)
        self.limit = min(max(limit, 1), max_limit)
        self.offset = (self.page - 1) * self.limit

    async def paginate(self, session: AsyncSession, query: Select[tuple[T]]) -> tuple[list[T], int]:
        """
        Run ``query`` for the current page.

        Returns
        -------
        tuple[list[T], int]
            Items on this page and the total row count of the unpaginated query
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = await session.scalar(count_query) or 0

        result = await session.execute(query.offset(self.offset).limit(self.limit))
        return list(result.scalars().all()), total
