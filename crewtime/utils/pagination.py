"""페이지네이션 유틸리티 모듈.

Pagination helpers shared by the list endpoints (shifts, timesheets,
notifications).
"""

import math
from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.schemas.common import CamelModel


class Page(CamelModel):
    """페이지네이션 결과 모델.

    Pagination envelope returned by list endpoints.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
        pages: 전체 페이지 수 (Total number of pages)
    """

    items: list[Any]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def build(cls, items: list[Any], total: int, page: int, per_page: int) -> "Page":
        """항목과 개수로 페이지를 구성합니다 — Build a page, computing the page count."""
        pages: int = math.ceil(total / per_page) if per_page > 0 else 0
        return cls(items=items, total=total, page=page, per_page=per_page, pages=pages)


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int = 1,
    per_page: int = 20,
) -> tuple[Sequence[Any], int]:
    """SQLAlchemy 쿼리에 대한 페이지네이션을 수행합니다.

    Execute a paginated query: one COUNT over the subquery and one page
    fetch with OFFSET/LIMIT.

    Args:
        db: 비동기 DB 세션 (Async database session)
        query: SQLAlchemy Select 쿼리 (Base query to paginate)
        page: 요청 페이지 번호, 1부터 시작 (Page number, 1-indexed)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        tuple[Sequence[Any], int]: (항목 목록, 전체 개수) (Items and total count)
    """
    page = max(page, 1)
    count_query = select(func.count()).select_from(query.subquery())
    total: int = (await db.execute(count_query)).scalar() or 0

    offset: int = (page - 1) * per_page
    result = await db.execute(query.offset(offset).limit(per_page))
    items: Sequence[Any] = result.scalars().all()

    return items, total


class NotificationPage(Page):
    """알림 목록 페이지 — Page of notifications plus the inbox-wide unread count."""

    unread_count: int = 0
