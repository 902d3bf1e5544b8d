"""출퇴근 기록 서비스 — 출근/퇴근/교대 종료/결근 상태 머신.

Time Entry Service — The per-assignment clock state machine. These
operations are the only writers of ``Assignment.status``.

State machine:
    not_started --clock_in--> clocked_in --clock_out--> clocked_out --clock_in--> clocked_in
    not_started --mark_no_show--> no_show [terminal]
    not_started | clocked_in | clocked_out --end_shift--> shift_ended [terminal]

Every operation loads the shift through the permission guard first, and
the batch operations lock the shift row before reading derived state.
"""

import logging
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.config import settings
from crewtime.models.assignment import Assignment, AssignmentStatus, TimeEntry
from crewtime.models.job import Shift, ShiftStatus
from crewtime.models.shift_log import ShiftLogAction
from crewtime.models.user import User
from crewtime.repositories.assignment_repository import assignment_repository, time_entry_repository
from crewtime.repositories.shift_log_repository import shift_log_repository
from crewtime.schemas.assignment import (
    ClockActionResponse,
    ClockedOutWorker,
    ClockOutAllResponse,
    EndAllShiftsResponse,
)
from crewtime.services.assignment_service import entry_to_response
from crewtime.services.permission_service import permission_service
from crewtime.utils.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ResourceExhaustedError,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TimeEntryService:
    """출퇴근 기록 서비스.

    Time entry ledger: clock in/out, clock out all, end shift, end all
    shifts and no-show.
    """

    async def _load(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> tuple[Shift, Assignment]:
        """교대 권한 검사 후 배정을 잠금 조회합니다.

        Guard the shift (locking its row), then load and lock the assignment.

        Raises:
            NotFoundError: 교대 또는 배정 없음 (Shift or assignment missing)
            ForbiddenError: 권한 없음 (Caller may not act on this shift)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, for_update=True, require_open=True)
        assignment: Assignment | None = await assignment_repository.get_in_shift(
            db, shift.id, assignment_id, for_update=True
        )
        if assignment is None:
            raise NotFoundError("Worker assignment not found")
        return shift, assignment

    def _close(self, entry: TimeEntry, at: datetime) -> None:
        entry.clock_out = at
        entry.is_active = False

    def _ensure_not_terminal(self, assignment: Assignment) -> None:
        if assignment.status in AssignmentStatus.TERMINAL:
            raise InvalidStateError(f"Worker shift is already closed (status: {assignment.status})")

    async def clock_in(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> ClockActionResponse:
        """작업자를 출근 처리합니다.

        Open a new time entry numbered with the lowest unused number and set
        the assignment to clocked_in. The first clock-in of an Upcoming
        shift moves the shift to In Progress.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 사용자 (Acting user)
            shift_id: 교대 UUID (Shift UUID)
            assignment_id: 배정 UUID — workerId (Assignment UUID)

        Returns:
            ClockActionResponse: 생성된 기록 포함 (Includes the opened entry)

        Raises:
            InvalidStateError: 빈 슬롯 또는 종료 상태 (Placeholder slot or terminal status)
            ConflictError: 이미 출근 중 (An entry is already active)
            ResourceExhaustedError: 출근 횟수 소진 (All entry numbers used)
        """
        shift, assignment = await self._load(db, actor, shift_id, assignment_id)

        if assignment.employee_id is None:
            raise InvalidStateError("No employee assigned to this slot")
        self._ensure_not_terminal(assignment)

        if await time_entry_repository.get_active(db, assignment.id) is not None:
            raise ConflictError("Employee is already clocked in")

        limit: int = settings.MAX_TIME_ENTRIES_PER_ASSIGNMENT
        used: set[int] = await time_entry_repository.get_used_numbers(db, assignment.id)
        free: list[int] = [n for n in range(1, limit + 1) if n not in used]
        if not free:
            raise ResourceExhaustedError(f"Maximum of {limit} clock-ins reached for this shift")

        try:
            entry: TimeEntry = await time_entry_repository.create(db, {
                "assignment_id": assignment.id,
                "entry_number": free[0],
                "clock_in": _now(),
                "is_active": True,
            })
        except IntegrityError:
            # 부분 유니크 인덱스 위반 — concurrent clock-in lost the race
            raise ConflictError("Employee is already clocked in")

        assignment.status = AssignmentStatus.CLOCKED_IN
        if shift.status == ShiftStatus.UPCOMING:
            shift.status = ShiftStatus.IN_PROGRESS
        await db.flush()

        logger.info(
            "Clock in: assignment %s entry %d on shift %s by %s",
            assignment.id, entry.entry_number, shift.id, actor.id,
        )
        return ClockActionResponse(
            message="Employee clocked in successfully",
            assignment_id=str(assignment.id),
            status=assignment.status,
            entry=entry_to_response(entry),
        )

    async def clock_out(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> ClockActionResponse:
        """작업자를 퇴근 처리합니다.

        Close the single active entry and set the assignment to clocked_out.

        Raises:
            InvalidStateError: 진행 중 기록 없음 또는 종료 상태
                               (No active entry, or terminal status)
        """
        shift, assignment = await self._load(db, actor, shift_id, assignment_id)
        self._ensure_not_terminal(assignment)

        entry: TimeEntry | None = await time_entry_repository.get_active(db, assignment.id)
        if entry is None:
            raise InvalidStateError("Employee is not clocked in")

        self._close(entry, _now())
        assignment.status = AssignmentStatus.CLOCKED_OUT
        await db.flush()

        logger.info(
            "Clock out: assignment %s entry %d on shift %s by %s",
            assignment.id, entry.entry_number, shift.id, actor.id,
        )
        return ClockActionResponse(
            message="Employee clocked out successfully",
            assignment_id=str(assignment.id),
            status=assignment.status,
            entry=entry_to_response(entry),
        )

    async def clock_out_all(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
    ) -> ClockOutAllResponse:
        """교대의 모든 진행 중 기록을 퇴근 처리합니다.

        Close every active entry under the shift and set each owner to
        clocked_out. Nothing active is a zero-count success.
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, for_update=True, require_open=True)
        entries: Sequence[TimeEntry] = await time_entry_repository.get_active_for_shift(db, shift.id)

        at: datetime = _now()
        workers: list[ClockedOutWorker] = []
        for entry in entries:
            self._close(entry, at)
            assignment: Assignment = entry.assignment
            assignment.status = AssignmentStatus.CLOCKED_OUT
            workers.append(ClockedOutWorker(
                assignment_id=str(assignment.id),
                employee_id=str(assignment.employee_id) if assignment.employee_id else None,
                employee_name=assignment.employee.full_name if assignment.employee else None,
                clock_out=at,
            ))

        if workers:
            await shift_log_repository.record(db, shift.id, actor.id, ShiftLogAction.CLOCK_OUT_ALL, {
                "assignmentIds": [w.assignment_id for w in workers],
            })
        await db.flush()

        logger.info("Clock out all: %d workers on shift %s by %s", len(workers), shift.id, actor.id)
        return ClockOutAllResponse(
            message=f"Clocked out {len(workers)} workers",
            clocked_out_count=len(workers),
            clocked_out_workers=workers,
        )

    async def end_shift(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> ClockActionResponse:
        """작업자의 교대를 종료합니다.

        Close the active entry, if any, and set the assignment to the
        terminal shift_ended state.

        Raises:
            InvalidStateError: 이미 종료 상태 (Already shift_ended or no_show)
        """
        shift, assignment = await self._load(db, actor, shift_id, assignment_id)
        self._ensure_not_terminal(assignment)

        entry: TimeEntry | None = await time_entry_repository.get_active(db, assignment.id)
        if entry is not None:
            self._close(entry, _now())
        assignment.status = AssignmentStatus.SHIFT_ENDED

        await shift_log_repository.record(db, shift.id, actor.id, ShiftLogAction.END_SHIFT, {
            "assignmentId": str(assignment.id),
            "employeeId": str(assignment.employee_id) if assignment.employee_id else None,
        })
        await db.flush()

        logger.info("End shift: assignment %s on shift %s by %s", assignment.id, shift.id, actor.id)
        return ClockActionResponse(
            message="Employee shift ended successfully",
            assignment_id=str(assignment.id),
            status=assignment.status,
            entry=entry_to_response(entry) if entry is not None else None,
        )

    async def end_all_shifts(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
    ) -> EndAllShiftsResponse:
        """교대의 모든 작업자 교대를 종료합니다.

        Close every active entry and move every non-terminal assignment to
        shift_ended. Runs inside the request transaction; a failure at any
        point leaves no assignment changed.
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, for_update=True, require_open=True)

        at: datetime = _now()
        for entry in await time_entry_repository.get_active_for_shift(db, shift.id):
            self._close(entry, at)

        ended: list[str] = []
        for assignment in await assignment_repository.get_by_shift(db, shift.id):
            if assignment.status in AssignmentStatus.TERMINAL:
                continue
            assignment.status = AssignmentStatus.SHIFT_ENDED
            ended.append(str(assignment.id))

        await shift_log_repository.record(db, shift.id, actor.id, ShiftLogAction.END_ALL_SHIFTS, {
            "assignmentIds": ended,
        })
        await db.flush()

        logger.info("End all shifts: %d workers on shift %s by %s", len(ended), shift.id, actor.id)
        return EndAllShiftsResponse(
            message=f"Ended shifts for {len(ended)} workers",
            ended_count=len(ended),
        )

    async def mark_no_show(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> ClockActionResponse:
        """작업자를 결근 처리합니다.

        Set a never-clocked-in assignment to the terminal no_show state and
        record it in the shift audit log.

        Raises:
            InvalidStateError: 출퇴근 기록 존재, 빈 슬롯, 또는 종료 상태
                               (Any time entry exists, placeholder slot, or terminal status)
        """
        shift, assignment = await self._load(db, actor, shift_id, assignment_id)

        if await time_entry_repository.has_entries(db, assignment.id):
            raise InvalidStateError("Cannot mark as no-show: employee has already clocked in")
        if assignment.employee_id is None:
            raise InvalidStateError("No employee assigned to this slot")
        self._ensure_not_terminal(assignment)

        assignment.status = AssignmentStatus.NO_SHOW
        await shift_log_repository.record(db, shift.id, actor.id, ShiftLogAction.NO_SHOW, {
            "assignmentId": str(assignment.id),
            "employeeId": str(assignment.employee_id),
        })
        await db.flush()

        logger.info(
            "No-show: assignment %s (employee %s) on shift %s by %s",
            assignment.id, assignment.employee_id, shift.id, actor.id,
        )
        return ClockActionResponse(
            message="Employee marked as no-show",
            assignment_id=str(assignment.id),
            status=assignment.status,
        )


# 싱글턴 인스턴스 — Singleton instance
time_entry_service: TimeEntryService = TimeEntryService()
