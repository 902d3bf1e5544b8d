"""타임시트 레포지토리.

Timesheet Repository — Lookup by shift (with optional row lock) and
status-filtered listing.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.timesheet import Timesheet
from crewtime.repositories.base import BaseRepository


class TimesheetRepository(BaseRepository[Timesheet]):
    """타임시트 레포지토리.

    Extends:
        BaseRepository[Timesheet]
    """

    def __init__(self) -> None:
        super().__init__(Timesheet)

    async def get_by_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        for_update: bool = False,
    ) -> Timesheet | None:
        """교대의 타임시트를 조회합니다 — The shift's timesheet, if one exists."""
        query: Select = select(Timesheet).where(Timesheet.shift_id == shift_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Timesheet], int]:
        """상태별 타임시트 목록 — Paginated timesheets, most recently submitted first."""
        query: Select = select(Timesheet)
        if status is not None:
            query = query.where(Timesheet.status == status)
        query = query.order_by(Timesheet.submitted_at.desc(), Timesheet.id)
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
timesheet_repository: TimesheetRepository = TimesheetRepository()
