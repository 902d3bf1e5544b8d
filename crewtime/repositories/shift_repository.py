"""고객사/작업/교대 레포지토리.

Client, Job and Shift repositories. Shift queries eager-load what the
lifecycle endpoints read (job, client, crew chief, timesheet) because lazy
loading is not available on an async session.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crewtime.models.job import Client, Job, Shift, WorkerRequirement
from crewtime.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """고객사 레포지토리 — Client company repository."""

    def __init__(self) -> None:
        super().__init__(Client)


class JobRepository(BaseRepository[Job]):
    """작업 레포지토리 — Job repository."""

    def __init__(self) -> None:
        super().__init__(Job)


class ShiftRepository(BaseRepository[Shift]):
    """교대 레포지토리.

    Shift repository with detail loading and filtered listing.

    Extends:
        BaseRepository[Shift]
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    def _detail_query(self) -> Select:
        return select(Shift).options(
            selectinload(Shift.job).selectinload(Job.client),
            selectinload(Shift.crew_chief),
            selectinload(Shift.timesheet),
        )

    async def get_detail(
        self,
        db: AsyncSession,
        shift_id: UUID,
        for_update: bool = False,
    ) -> Shift | None:
        """교대 상세를 조회합니다.

        Retrieve a shift with job, client, crew chief and timesheet loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 교대 UUID (Shift UUID)
            for_update: 교대 행 잠금 여부 (Lock the shift row for the transaction)

        Returns:
            Shift | None: 교대 또는 None (Shift or None)
        """
        query: Select = self._detail_query().where(Shift.id == shift_id)
        if for_update:
            # 관계 로딩은 별도 SELECT이므로 잠금은 shifts 행에만 적용
            # Relationship loads are separate SELECTs; only the shift row is locked
            query = query.with_for_update(of=Shift)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        job_id: UUID | None = None,
        shift_date: date | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Shift], int]:
        """필터 조건에 맞는 교대를 페이지네이션하여 조회합니다.

        Retrieve paginated shifts matching the given filters, newest date first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            job_id: 작업 필터, 선택 (Optional job filter)
            shift_date: 날짜 필터, 선택 (Optional date filter)
            status: 상태 필터, 선택 (Optional status filter)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Shift], int]: (교대 목록, 전체 개수) (Shifts, total count)
        """
        query: Select = self._detail_query()

        if job_id is not None:
            query = query.where(Shift.job_id == job_id)
        if shift_date is not None:
            query = query.where(Shift.date == shift_date)
        if status is not None:
            query = query.where(Shift.status == status)

        query = query.order_by(Shift.date.desc(), Shift.start_time)
        return await self.get_paginated(db, query, page, per_page)


class WorkerRequirementRepository(BaseRepository[WorkerRequirement]):
    """역할별 필요 인원 레포지토리.

    Worker requirements are read and written per shift as a whole set.
    """

    def __init__(self) -> None:
        super().__init__(WorkerRequirement)

    async def get_by_shift(self, db: AsyncSession, shift_id: UUID) -> Sequence[WorkerRequirement]:
        """교대의 역할별 필요 인원 (역할 코드순) — Requirements of a shift by role code."""
        return await self.get_all(db, filters={"shift_id": shift_id}, order_by=WorkerRequirement.role_code)

    async def replace_for_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        counts: dict[str, int],
    ) -> Sequence[WorkerRequirement]:
        """교대의 필요 인원 행을 통째로 교체합니다.

        Delete the shift's rows and insert one per role code in ``counts``.
        Zero counts are kept so a role can be listed as explicitly unneeded.
        """
        await db.execute(delete(WorkerRequirement).where(WorkerRequirement.shift_id == shift_id))
        db.add_all(
            WorkerRequirement(shift_id=shift_id, role_code=code, required_count=count)
            for code, count in counts.items()
        )
        await db.flush()
        return await self.get_by_shift(db, shift_id)


# 싱글턴 인스턴스 — Singleton instances
client_repository: ClientRepository = ClientRepository()
job_repository: JobRepository = JobRepository()
shift_repository: ShiftRepository = ShiftRepository()
worker_requirement_repository: WorkerRequirementRepository = WorkerRequirementRepository()
