"""교대 배정 및 출퇴근 기록 레포지토리.

Assignment and TimeEntry repositories — Queries behind the assignment store
and the time entry ledger.
"""

from datetime import date, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crewtime.models.assignment import Assignment, AssignmentStatus, TimeEntry
from crewtime.models.job import Job, Shift, ShiftStatus
from crewtime.repositories.base import BaseRepository


class AssignmentRepository(BaseRepository[Assignment]):
    """교대 배정 레포지토리.

    Assignment repository. Lookups are always scoped to the owning shift so
    an assignment id from another shift is treated as missing.

    Extends:
        BaseRepository[Assignment]
    """

    def __init__(self) -> None:
        super().__init__(Assignment)

    async def get_in_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        assignment_id: UUID,
        for_update: bool = False,
    ) -> Assignment | None:
        """교대 범위 내에서 배정을 조회합니다.

        Retrieve an assignment that belongs to the given shift.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 교대 UUID (Shift UUID)
            assignment_id: 배정 UUID (Assignment UUID)
            for_update: 배정 행 잠금 여부 (Lock the assignment row)

        Returns:
            Assignment | None: 배정 또는 None (Assignment or None)
        """
        query: Select = (
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .where(Assignment.shift_id == shift_id)
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        with_entries: bool = False,
    ) -> Sequence[Assignment]:
        """교대의 모든 배정을 조회합니다.

        Retrieve every assignment of a shift in creation order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 교대 UUID (Shift UUID)
            with_entries: 작업자와 출퇴근 기록 함께 로드 (Also load employee and time entries)

        Returns:
            Sequence[Assignment]: 배정 목록 (Assignments)
        """
        query: Select = (
            select(Assignment)
            .where(Assignment.shift_id == shift_id)
            .order_by(Assignment.created_at, Assignment.id)
        )
        if with_entries:
            query = query.options(
                selectinload(Assignment.employee),
                selectinload(Assignment.time_entries),
            )
        result = await db.execute(query)
        return result.scalars().all()

    async def employee_on_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        employee_id: UUID,
    ) -> bool:
        """작업자가 이미 교대에 배정되었는지 확인 — Whether the employee already holds a slot."""
        return await self.exists(db, {"shift_id": shift_id, "employee_id": employee_id})

    async def count_unfinished(
        self,
        db: AsyncSession,
        shift_id: UUID,
    ) -> int:
        """종료 상태가 아닌 배정 수를 셉니다.

        Count assignments of the shift whose status is neither shift_ended
        nor no_show.
        """
        query: Select = (
            select(func.count())
            .select_from(Assignment)
            .where(Assignment.shift_id == shift_id)
            .where(Assignment.status.not_in(AssignmentStatus.TERMINAL))
        )
        return (await db.execute(query)).scalar() or 0

    async def count_filled_by_role(
        self,
        db: AsyncSession,
        shift_id: UUID,
    ) -> dict[str, int]:
        """역할 코드별 채워진 슬롯 수 — Filled (non-placeholder) slots per role code."""
        query: Select = (
            select(Assignment.role_code, func.count())
            .where(Assignment.shift_id == shift_id)
            .where(Assignment.employee_id.is_not(None))
            .group_by(Assignment.role_code)
        )
        return {code: count for code, count in (await db.execute(query)).all()}

    async def get_employee_assignments_near(
        self,
        db: AsyncSession,
        employee_id: UUID,
        around: date,
        exclude_shift_id: UUID,
    ) -> Sequence[Assignment]:
        """작업자의 인접 날짜 배정을 조회합니다.

        Assignments of the employee on shifts dated the day before through
        the day after ``around``, other than ``exclude_shift_id`` and not on
        cancelled shifts. The neighbouring days catch shifts that run past
        midnight. Shift, job and client are loaded.
        """
        query: Select = (
            select(Assignment)
            .join(Shift, Shift.id == Assignment.shift_id)
            .options(selectinload(Assignment.shift).selectinload(Shift.job).selectinload(Job.client))
            .where(Assignment.employee_id == employee_id)
            .where(Assignment.shift_id != exclude_shift_id)
            .where(Shift.date.between(around - timedelta(days=1), around + timedelta(days=1)))
            .where(Shift.status != ShiftStatus.CANCELLED)
            .order_by(Shift.date, Shift.start_time)
        )
        return (await db.execute(query)).scalars().all()


class TimeEntryRepository(BaseRepository[TimeEntry]):
    """출퇴근 기록 레포지토리.

    TimeEntry repository — Active entry lookup, entry-number allocation
    and shift-wide batch reads.

    Extends:
        BaseRepository[TimeEntry]
    """

    def __init__(self) -> None:
        super().__init__(TimeEntry)

    async def get_active(
        self,
        db: AsyncSession,
        assignment_id: UUID,
    ) -> TimeEntry | None:
        """배정의 진행 중 기록을 조회합니다 — The open entry of an assignment, if any."""
        query: Select = (
            select(TimeEntry)
            .where(TimeEntry.assignment_id == assignment_id)
            .where(TimeEntry.is_active.is_(True))
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_used_numbers(
        self,
        db: AsyncSession,
        assignment_id: UUID,
    ) -> set[int]:
        """사용된 기록 번호 집합 — Entry numbers already taken by the assignment."""
        query: Select = select(TimeEntry.entry_number).where(TimeEntry.assignment_id == assignment_id)
        result = await db.execute(query)
        return set(result.scalars().all())

    async def has_entries(
        self,
        db: AsyncSession,
        assignment_id: UUID,
    ) -> bool:
        """기록 존재 여부 — Whether any entry, open or closed, exists."""
        return await self.exists(db, {"assignment_id": assignment_id})

    async def get_active_for_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
    ) -> Sequence[TimeEntry]:
        """교대 전체의 진행 중 기록을 조회합니다.

        Retrieve every open entry under the shift with its assignment and
        employee loaded.
        """
        query: Select = (
            select(TimeEntry)
            .join(Assignment, Assignment.id == TimeEntry.assignment_id)
            .options(selectinload(TimeEntry.assignment).selectinload(Assignment.employee))
            .where(Assignment.shift_id == shift_id)
            .where(TimeEntry.is_active.is_(True))
            .order_by(Assignment.created_at, Assignment.id)
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
assignment_repository: AssignmentRepository = AssignmentRepository()
time_entry_repository: TimeEntryRepository = TimeEntryRepository()
