"""교대 배정 서비스 — 작업자 배정/재배정/해제 비즈니스 로직.

Assignment Service — Places workers on shifts, fills or moves slots, and
removes slots that have no recorded time.

Rules:
    - 교대당 같은 작업자는 한 번만 배정 (An employee holds at most one slot per shift)
    - 시간이 겹치는 다른 교대에 중복 배정 불가 (No employee on two overlapping shifts)
    - 출퇴근 기록이 있는 슬롯은 해제/재배정 불가 (Slots with time entries are frozen)
    - 배정 상태는 not_started로 시작 (New and reassigned slots start as not_started)
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.assignment import ROLE_CODES, Assignment, AssignmentStatus, TimeEntry
from crewtime.models.job import Shift
from crewtime.models.user import User
from crewtime.repositories.assignment_repository import assignment_repository, time_entry_repository
from crewtime.repositories.shift_repository import shift_repository
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.assignment import (
    AssignmentResponse,
    AssignRequest,
    AssignWorkerRequest,
    TimeEntryResponse,
)
from crewtime.schemas.common import SuccessResponse
from crewtime.schemas.shift import ConflictCheckRequest, ConflictCheckResponse, ShiftConflict
from crewtime.services.notification_service import notification_service
from crewtime.services.permission_service import permission_service
from crewtime.utils.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def entry_to_response(entry: TimeEntry) -> TimeEntryResponse:
    """출퇴근 기록 ORM → 응답 변환 — Build a TimeEntryResponse."""
    return TimeEntryResponse(
        id=str(entry.id),
        entry_number=entry.entry_number,
        clock_in=entry.clock_in,
        clock_out=entry.clock_out,
        is_active=entry.is_active,
    )


def shift_window(shift: Shift) -> tuple[datetime, datetime]:
    """교대의 실제 시작/종료 시각 — An end at or before the start runs past midnight."""
    start: datetime = datetime.combine(shift.date, shift.start_time)
    end: datetime = datetime.combine(shift.date, shift.end_time)
    if end <= start:
        end += timedelta(days=1)
    return start, end


def shifts_overlap(a: Shift, b: Shift) -> bool:
    a_start, a_end = shift_window(a)
    b_start, b_end = shift_window(b)
    return a_start < b_end and b_start < a_end


class AssignmentService:
    """교대 배정 서비스.

    Assignment store: assign, reassign, unassign and list.
    """

    async def _get_employee(self, db: AsyncSession, employee_id: UUID) -> User:
        employee: User | None = await user_repository.get_by_id(db, employee_id)
        if employee is None or not employee.is_active:
            raise NotFoundError("Employee not found")
        return employee

    async def _get_assignment(
        self,
        db: AsyncSession,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> Assignment:
        assignment: Assignment | None = await assignment_repository.get_in_shift(
            db, shift_id, assignment_id, for_update=True
        )
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    async def _find_conflicts(
        self,
        db: AsyncSession,
        shift: Shift,
        employee_id: UUID,
    ) -> list[Assignment]:
        candidates: Sequence[Assignment] = await assignment_repository.get_employee_assignments_near(
            db, employee_id, shift.date, shift.id
        )
        return [a for a in candidates if shifts_overlap(shift, a.shift)]

    async def _ensure_not_double_booked(self, db: AsyncSession, shift: Shift, employee: User) -> None:
        if await self._find_conflicts(db, shift, employee.id):
            logger.info("Refused double booking of %s on shift %s", employee.id, shift.id)
            raise ConflictError("Employee is already assigned to an overlapping shift")

    async def check_conflicts(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        data: ConflictCheckRequest,
    ) -> ConflictCheckResponse:
        """중복 배정 여부를 미리 확인합니다.

        Report the employee's assignments on other, non-cancelled shifts
        whose time window overlaps this shift's. Read-only; assign and
        assign-worker enforce the same rule.

        Raises:
            NotFoundError: 교대 또는 작업자 없음 (Shift or employee missing)
            ForbiddenError: 권한 없음 (Caller may not act on this shift)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id)
        employee: User = await self._get_employee(db, data.employee_id)
        conflicts: list[Assignment] = await self._find_conflicts(db, shift, employee.id)
        return ConflictCheckResponse(
            has_conflicts=bool(conflicts),
            conflicts=[
                ShiftConflict(
                    shift_id=str(a.shift_id),
                    date=a.shift.date,
                    start_time=a.shift.start_time,
                    end_time=a.shift.end_time,
                    job_name=a.shift.job.name,
                    client_name=a.shift.job.client.company_name,
                    role_code=a.role_code,
                )
                for a in conflicts
            ],
        )

    async def assign(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        data: AssignRequest,
    ) -> AssignmentResponse:
        """교대에 배정 슬롯을 생성합니다.

        Create an assignment with status not_started. A null employee makes
        a placeholder slot.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 사용자 (Acting user)
            shift_id: 교대 UUID (Shift UUID)
            data: 배정 요청 (Employee, role code, optional label)

        Returns:
            AssignmentResponse: 생성된 배정 (Created assignment)

        Raises:
            NotFoundError: 교대 또는 작업자 없음 (Shift or employee missing)
            ConflictError: 이미 배정된 작업자 또는 시간이 겹치는 교대
                           (Employee already on this shift or on an overlapping one)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, require_open=True)

        employee: User | None = None
        if data.employee_id is not None:
            employee = await self._get_employee(db, data.employee_id)
            if await assignment_repository.employee_on_shift(db, shift.id, employee.id):
                raise ConflictError("Employee is already assigned to this shift")
            await self._ensure_not_double_booked(db, shift, employee)

        try:
            assignment: Assignment = await assignment_repository.create(db, {
                "shift_id": shift.id,
                "employee_id": data.employee_id,
                "role_code": data.role_code,
                "role_label": data.role_label or ROLE_CODES[data.role_code],
                "status": AssignmentStatus.NOT_STARTED,
            })
        except IntegrityError:
            # 동시 배정 경쟁 — concurrent assign of the same employee
            raise ConflictError("Employee is already assigned to this shift")

        if employee is not None:
            await notification_service.create_for_assignment(db, employee.id, shift)

        logger.info(
            "Assigned %s as %s on shift %s (assignment %s) by %s",
            data.employee_id or "placeholder", data.role_code, shift.id, assignment.id, actor.id,
        )
        return AssignmentResponse(
            id=str(assignment.id),
            shift_id=str(assignment.shift_id),
            employee_id=str(employee.id) if employee else None,
            employee_name=employee.full_name if employee else None,
            role_code=assignment.role_code,
            role_label=assignment.role_label,
            status=assignment.status,
            time_entries=[],
        )

    async def reassign(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        data: AssignWorkerRequest,
    ) -> SuccessResponse:
        """기존 슬롯의 작업자를 변경합니다.

        Put an employee into an existing slot (typically a placeholder) and
        reset the slot to not_started. Reassigning the current occupant is a
        no-op success.

        Raises:
            NotFoundError: 교대/슬롯/작업자 없음 (Shift, slot or employee missing)
            ConflictError: 기록이 있는 슬롯 또는 이미 배정된 작업자
                           (Slot has time entries, or employee already on this or an overlapping shift)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, require_open=True)
        assignment: Assignment = await self._get_assignment(db, shift.id, data.assignment_id)
        employee: User = await self._get_employee(db, data.employee_id)

        if assignment.employee_id == employee.id:
            return SuccessResponse(message="Worker already assigned to this slot")

        if await time_entry_repository.has_entries(db, assignment.id):
            raise ConflictError("Cannot reassign a slot that has time entries")
        if await assignment_repository.employee_on_shift(db, shift.id, employee.id):
            raise ConflictError("Employee is already assigned to this shift")
        await self._ensure_not_double_booked(db, shift, employee)

        previous: UUID | None = assignment.employee_id
        try:
            await assignment_repository.update(db, assignment, {
                "employee_id": employee.id,
                "status": AssignmentStatus.NOT_STARTED,
            })
        except IntegrityError:
            raise ConflictError("Employee is already assigned to this shift")

        await notification_service.create_for_assignment(db, employee.id, shift)
        logger.info(
            "Reassigned slot %s on shift %s from %s to %s by %s",
            assignment.id, shift.id, previous, employee.id, actor.id,
        )
        return SuccessResponse(message="Worker assigned successfully")

    async def unassign(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
        assignment_id: UUID,
    ) -> SuccessResponse:
        """배정을 삭제합니다.

        Delete an assignment. Refused while any time entry references it;
        the caller must end the worker's shift instead.

        Raises:
            NotFoundError: 교대 또는 슬롯 없음 (Shift or slot missing)
            ConflictError(400): 출퇴근 기록 존재 (Slot has time entries)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, require_open=True)
        assignment: Assignment = await self._get_assignment(db, shift.id, assignment_id)

        if await time_entry_repository.has_entries(db, assignment.id):
            raise ConflictError(
                "Cannot unassign worker with existing time entries. End their shift instead.",
                status_code=400,
            )

        await assignment_repository.delete(db, assignment)
        logger.info("Unassigned slot %s from shift %s by %s", assignment_id, shift.id, actor.id)
        return SuccessResponse(message="Worker unassigned successfully")

    async def list_assigned(
        self,
        db: AsyncSession,
        shift_id: UUID,
    ) -> list[AssignmentResponse]:
        """교대의 배정 목록을 조회합니다.

        List every assignment of the shift with its time entries.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
        """
        if await shift_repository.get_by_id(db, shift_id) is None:
            raise NotFoundError("Shift not found")
        assignments: Sequence[Assignment] = await assignment_repository.get_by_shift(
            db, shift_id, with_entries=True
        )
        return [self.to_response(a) for a in assignments]

    def to_response(self, assignment: Assignment) -> AssignmentResponse:
        """배정 ORM → 응답 변환. employee, time_entries 로드 필요.

        Build an AssignmentResponse; employee and time_entries must be loaded.
        """
        return AssignmentResponse(
            id=str(assignment.id),
            shift_id=str(assignment.shift_id),
            employee_id=str(assignment.employee_id) if assignment.employee_id else None,
            employee_name=assignment.employee.full_name if assignment.employee else None,
            role_code=assignment.role_code,
            role_label=assignment.role_label,
            status=assignment.status,
            time_entries=[entry_to_response(entry) for entry in assignment.time_entries],
        )


# 싱글턴 인스턴스 — Singleton instance
assignment_service: AssignmentService = AssignmentService()
