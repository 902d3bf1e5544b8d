"""교대 서비스 — 고객사/작업/교대 관리 비즈니스 로직.

Shift Service — Business logic for clients, jobs and shifts: creation,
listing, detail, cascade deletion, per-role worker requirements and the
shift audit log.
"""

import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.assignment import ROLE_CODES
from crewtime.models.job import Client, Job, Shift, ShiftStatus, WorkerRequirement
from crewtime.models.shift_log import ShiftLog
from crewtime.models.user import User
from crewtime.repositories.assignment_repository import assignment_repository
from crewtime.repositories.shift_log_repository import shift_log_repository
from crewtime.repositories.shift_repository import (
    client_repository,
    job_repository,
    shift_repository,
    worker_requirement_repository,
)
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.shift import (
    ClientCreate,
    ClientResponse,
    JobCreate,
    JobResponse,
    ShiftCreate,
    ShiftLogResponse,
    ShiftResponse,
    TimesheetSummary,
    WorkerRequirementResponse,
    WorkerRequirementsResponse,
    WorkerRequirementsUpdate,
)
from crewtime.services.permission_service import ensure_shift_open, permission_service
from crewtime.utils.exceptions import BadRequestError, NotFoundError
from crewtime.utils.pagination import Page

logger = logging.getLogger(__name__)


class ShiftService:
    """고객사/작업/교대 서비스.

    Client, job and shift management service.
    """

    # --- 고객사 (Clients) ---

    async def create_client(self, db: AsyncSession, data: ClientCreate) -> ClientResponse:
        """고객사를 생성합니다 — Create a client company."""
        client: Client = await client_repository.create(db, data.model_dump())
        return self._client_response(client)

    async def list_clients(self, db: AsyncSession) -> list[ClientResponse]:
        """고객사 목록 — Every client, alphabetically."""
        clients: Sequence[Client] = await client_repository.get_all(db, order_by=Client.company_name)
        return [self._client_response(c) for c in clients]

    # --- 작업 (Jobs) ---

    async def create_job(self, db: AsyncSession, data: JobCreate) -> JobResponse:
        """작업을 생성합니다.

        Raises:
            NotFoundError: 고객사 없음 (Client does not exist)
        """
        if await client_repository.get_by_id(db, data.client_id) is None:
            raise NotFoundError("Client not found")
        job: Job = await job_repository.create(db, data.model_dump())
        return self._job_response(job)

    async def list_jobs(self, db: AsyncSession, client_id: UUID | None = None) -> list[JobResponse]:
        """작업 목록 — Jobs, optionally for one client."""
        jobs: Sequence[Job] = await job_repository.get_all(
            db, filters={"client_id": client_id}, order_by=Job.created_at
        )
        return [self._job_response(j) for j in jobs]

    # --- 교대 (Shifts) ---

    async def create_shift(self, db: AsyncSession, data: ShiftCreate) -> ShiftResponse:
        """교대를 생성합니다.

        Create a shift under a job with status Upcoming.

        Raises:
            NotFoundError: 작업 또는 크루 치프 없음 (Job or crew chief does not exist)
        """
        if await job_repository.get_by_id(db, data.job_id) is None:
            raise NotFoundError("Job not found")
        if data.crew_chief_id is not None and await user_repository.get_by_id(db, data.crew_chief_id) is None:
            raise NotFoundError("Crew chief not found")

        shift: Shift = await shift_repository.create(db, {
            **data.model_dump(),
            "status": ShiftStatus.UPCOMING,
        })
        logger.info("Created shift %s for job %s on %s", shift.id, data.job_id, data.date)
        return await self.get_shift(db, shift.id)

    async def get_shift(self, db: AsyncSession, shift_id: UUID) -> ShiftResponse:
        """교대 상세를 조회합니다.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
        """
        shift: Shift | None = await shift_repository.get_detail(db, shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        return self.to_response(shift)

    async def list_shifts(
        self,
        db: AsyncSession,
        job_id: UUID | None = None,
        shift_date: date | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Page:
        """교대 목록을 조회합니다 — Paginated, filterable shift list."""
        if status is not None and status not in ShiftStatus.ALL:
            raise BadRequestError(f"Unknown shift status '{status}'")
        shifts, total = await shift_repository.get_filtered(db, job_id, shift_date, status, page, per_page)
        return Page.build([self.to_response(s) for s in shifts], total, page, per_page)

    async def delete_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        actor: User,
        confirm: bool = False,
    ) -> None:
        """교대를 영구 삭제합니다.

        Hard-delete a shift. Assignments, time entries, the timesheet and the
        audit log go with it through ON DELETE CASCADE.

        Raises:
            BadRequestError: confirm 미지정 (Deletion not confirmed)
            NotFoundError: 교대 없음 (Shift does not exist)
        """
        if not confirm:
            raise BadRequestError("Deleting a shift requires confirm=true")
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id, for_update=True)
        if shift is None:
            raise NotFoundError("Shift not found")
        await shift_repository.delete(db, shift)
        logger.warning("Shift %s deleted by %s", shift_id, actor.id)

    # --- 역할별 필요 인원 (Worker requirements) ---

    async def _requirements_response(
        self,
        db: AsyncSession,
        shift: Shift,
        rows: Sequence[WorkerRequirement],
    ) -> WorkerRequirementsResponse:
        filled: dict[str, int] = await assignment_repository.count_filled_by_role(db, shift.id)
        return WorkerRequirementsResponse(
            shift_id=str(shift.id),
            requested_workers=shift.requested_workers,
            worker_requirements=[
                WorkerRequirementResponse(
                    role_code=row.role_code,
                    role_label=ROLE_CODES[row.role_code],
                    required_count=row.required_count,
                    assigned_count=filled.get(row.role_code, 0),
                )
                for row in rows
            ],
        )

    async def get_worker_requirements(self, db: AsyncSession, shift_id: UUID) -> WorkerRequirementsResponse:
        """교대의 역할별 필요 인원과 채워진 슬롯 수를 조회합니다.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
        """
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        rows: Sequence[WorkerRequirement] = await worker_requirement_repository.get_by_shift(db, shift.id)
        return await self._requirements_response(db, shift, rows)

    async def set_worker_requirements(
        self,
        db: AsyncSession,
        shift_id: UUID,
        data: WorkerRequirementsUpdate,
        actor: User,
    ) -> WorkerRequirementsResponse:
        """역할별 필요 인원을 교체합니다 (관리자).

        Replace the shift's per-role requirements with the given set and
        set ``requested_workers`` to their sum.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
            InvalidStateError: 확정/취소된 교대 (Shift is finalized or cancelled)
        """
        shift: Shift | None = await shift_repository.get_detail(db, shift_id, for_update=True)
        if shift is None:
            raise NotFoundError("Shift not found")
        ensure_shift_open(shift)

        counts: dict[str, int] = {item.role_code: item.required_count for item in data.worker_requirements}
        rows: Sequence[WorkerRequirement] = await worker_requirement_repository.replace_for_shift(
            db, shift.id, counts
        )
        shift.requested_workers = sum(counts.values())
        await db.flush()

        logger.info(
            "Set worker requirements on shift %s to %s (%d workers) by %s",
            shift.id, counts, shift.requested_workers, actor.id,
        )
        return await self._requirements_response(db, shift, rows)

    async def list_logs(
        self,
        db: AsyncSession,
        shift_id: UUID,
        actor: User,
    ) -> list[ShiftLogResponse]:
        """교대 감사 로그를 조회합니다 (관리자 또는 크루 치프).

        List the shift's audit trail, newest first. Guarded like a lifecycle
        action.
        """
        await permission_service.get_authorized_shift(db, actor, shift_id)
        logs: Sequence[ShiftLog] = await shift_log_repository.get_by_shift(db, shift_id)
        return [
            ShiftLogResponse(
                id=str(log.id),
                action=log.action,
                actor_id=str(log.actor_id) if log.actor_id else None,
                actor_name=log.actor.full_name if log.actor else None,
                details=log.details,
                created_at=log.created_at,
            )
            for log in logs
        ]

    # --- 변환 (Response builders) ---

    def to_response(self, shift: Shift) -> ShiftResponse:
        """교대 ORM → 응답 변환. job, client, crew chief, timesheet 로드 필요.

        Build a ShiftResponse; job, client, crew chief and timesheet must be loaded.
        """
        timesheet: TimesheetSummary | None = None
        if shift.timesheet is not None:
            timesheet = TimesheetSummary(
                id=str(shift.timesheet.id),
                status=shift.timesheet.status,
                submitted_at=shift.timesheet.submitted_at,
            )
        return ShiftResponse(
            id=str(shift.id),
            job_id=str(shift.job_id),
            job_name=shift.job.name,
            client_id=str(shift.job.client_id),
            client_name=shift.job.client.company_name,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            location=shift.location,
            crew_chief_id=str(shift.crew_chief_id) if shift.crew_chief_id else None,
            crew_chief_name=shift.crew_chief.full_name if shift.crew_chief else None,
            requested_workers=shift.requested_workers,
            status=shift.status,
            notes=shift.notes,
            timesheet=timesheet,
        )

    def _client_response(self, client: Client) -> ClientResponse:
        return ClientResponse(
            id=str(client.id),
            company_name=client.company_name,
            contact_name=client.contact_name,
            contact_email=client.contact_email,
        )

    def _job_response(self, job: Job) -> JobResponse:
        return JobResponse(
            id=str(job.id),
            client_id=str(job.client_id),
            name=job.name,
            po_number=job.po_number,
        )


# 싱글턴 인스턴스 — Singleton instance
shift_service: ShiftService = ShiftService()
