"""타임시트 서비스 — 교대 확정 및 승인 체인 비즈니스 로직.

Timesheet Service — Shift finalization, the approval chain, timesheet
views and the spreadsheet export.

Approval chain (status only moves forward):
    finalize        → pending_client_approval
    client approval → pending_final_approval
    manager approval → completed
"""

import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Sequence
from zoneinfo import ZoneInfo
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.config import settings
from crewtime.models.assignment import Assignment
from crewtime.models.job import Shift, ShiftStatus
from crewtime.models.shift_log import ShiftLogAction
from crewtime.models.timesheet import Timesheet, TimesheetStatus
from crewtime.models.user import RoleLevel, User
from crewtime.repositories.assignment_repository import assignment_repository
from crewtime.repositories.shift_log_repository import shift_log_repository
from crewtime.repositories.shift_repository import shift_repository
from crewtime.repositories.timesheet_repository import timesheet_repository
from crewtime.schemas.assignment import FinalizeResponse
from crewtime.schemas.timesheet import (
    ApproveRequest,
    TimesheetDetailResponse,
    TimesheetResponse,
    TimesheetWorker,
)
from crewtime.services.assignment_service import entry_to_response
from crewtime.services.notification_service import notification_service
from crewtime.services.permission_service import NO_PERMISSION, permission_service
from crewtime.services.shift_service import shift_service
from crewtime.utils.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PreconditionError,
)
from crewtime.utils.pagination import Page

logger = logging.getLogger(__name__)

# 출퇴근 최대 3쌍까지 엑셀 열 생성 — IN/OUT column pairs; entry numbers are capped at 3 by the DB
EXPORT_ENTRY_PAIRS: int = 3


def _local_hhmm(value: datetime | None, zone: ZoneInfo) -> str:
    """UTC 시각을 현장 시간대 HH:MM으로 — Render a stored instant as local wall-clock time."""
    if value is None:
        return ""
    if value.tzinfo is None:
        # SQLite는 tz 정보를 버림
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(zone).strftime("%H:%M")


class TimesheetService:
    """타임시트 서비스.

    Shift finalization workflow and timesheet approval chain.
    """

    def _advance(self, timesheet: Timesheet, new_status: str) -> None:
        """상태를 전진시킵니다 — Move the timesheet forward; a lower rank is rejected."""
        if TimesheetStatus.rank(new_status) < TimesheetStatus.rank(timesheet.status):
            raise InvalidStateError(
                f"Timesheet cannot move from {timesheet.status} back to {new_status}"
            )
        timesheet.status = new_status

    async def _get_timesheet_and_shift(
        self,
        db: AsyncSession,
        timesheet_id: UUID,
        for_update: bool = False,
    ) -> tuple[Timesheet, Shift]:
        timesheet: Timesheet | None = await timesheet_repository.get_by_id(db, timesheet_id, for_update=for_update)
        if timesheet is None:
            raise NotFoundError("Timesheet not found")
        shift: Shift | None = await shift_repository.get_detail(db, timesheet.shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        return timesheet, shift

    def _is_client_of(self, user: User, shift: Shift) -> bool:
        return (
            user.role.level == RoleLevel.CLIENT
            and user.client_id is not None
            and user.client_id == shift.job.client_id
        )

    async def _can_view(self, db: AsyncSession, user: User, shift: Shift) -> bool:
        if self._is_client_of(user, shift):
            return True
        return await permission_service.resolve_source(db, user, shift) != NO_PERMISSION

    # --- 확정 (Finalize) ---

    async def finalize(
        self,
        db: AsyncSession,
        actor: User,
        shift_id: UUID,
    ) -> FinalizeResponse:
        """교대 타임시트를 확정합니다.

        Check that every assignment is shift_ended or no_show, then create
        or refresh the shift's single timesheet at pending_client_approval
        and mark the shift Completed. The shift row stays locked from the
        check to the commit.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 사용자 (Acting user)
            shift_id: 교대 UUID (Shift UUID)

        Returns:
            FinalizeResponse: 타임시트 ID와 상태 (Timesheet id and status)

        Raises:
            PreconditionError: 종료되지 않은 작업자 존재 (Workers still open; carries the count)
            InvalidStateError: 취소된 교대 또는 이미 승인 진행 중
                               (Shift cancelled, or timesheet already past client approval)
        """
        shift: Shift = await permission_service.get_authorized_shift(db, actor, shift_id, for_update=True)
        # 재확정은 허용, 취소된 교대는 불가 — retry stays idempotent; a cancelled shift never completes
        if shift.status == ShiftStatus.CANCELLED:
            raise InvalidStateError("Cannot finalize a cancelled shift")

        remaining: int = await assignment_repository.count_unfinished(db, shift.id)
        if remaining > 0:
            raise PreconditionError(f"{remaining} workers have not ended their shifts")

        now: datetime = datetime.now(timezone.utc)
        timesheet: Timesheet | None = await timesheet_repository.get_by_shift(db, shift.id, for_update=True)
        if timesheet is None:
            try:
                timesheet = await timesheet_repository.create(db, {
                    "shift_id": shift.id,
                    "status": TimesheetStatus.PENDING_CLIENT_APPROVAL,
                    "submitted_by": actor.id,
                    "submitted_at": now,
                })
            except IntegrityError:
                raise ConflictError("Timesheet for this shift is being finalized concurrently")
        else:
            self._advance(timesheet, TimesheetStatus.PENDING_CLIENT_APPROVAL)
            timesheet.submitted_by = actor.id
            timesheet.submitted_at = now

        shift.status = ShiftStatus.COMPLETED
        await shift_log_repository.record(db, shift.id, actor.id, ShiftLogAction.FINALIZE, {
            "timesheetId": str(timesheet.id),
        })
        await db.flush()

        logger.info("Finalized timesheet %s for shift %s by %s", timesheet.id, shift.id, actor.id)
        return FinalizeResponse(
            message="Timesheet finalized and submitted for client approval",
            timesheet_id=str(timesheet.id),
            status=timesheet.status,
        )

    # --- 승인 (Approval chain) ---

    async def approve(
        self,
        db: AsyncSession,
        actor: User,
        timesheet_id: UUID,
        data: ApproveRequest,
    ) -> TimesheetResponse:
        """타임시트를 승인합니다.

        client: pending_client_approval → pending_final_approval; managers,
            the shift's crew chief, or a user of the owning client company.
        manager: pending_final_approval → completed; managers only.

        Raises:
            BadRequestError: 알 수 없는 승인 유형 (Unknown approval type)
            ForbiddenError: 승인 권한 없음 (Caller may not approve this step)
            InvalidStateError: 선행 상태 불일치 (Timesheet not at the preceding status)
        """
        if data.approval_type not in ("client", "manager"):
            raise BadRequestError("approvalType must be 'client' or 'manager'")

        timesheet, shift = await self._get_timesheet_and_shift(db, timesheet_id, for_update=True)
        now: datetime = datetime.now(timezone.utc)

        if data.approval_type == "client":
            if not await self._can_view(db, actor, shift):
                raise ForbiddenError("Not allowed to approve this timesheet")
            if timesheet.status != TimesheetStatus.PENDING_CLIENT_APPROVAL:
                raise InvalidStateError(f"Timesheet is not awaiting client approval (status: {timesheet.status})")

            self._advance(timesheet, TimesheetStatus.PENDING_FINAL_APPROVAL)
            timesheet.client_approved_by = actor.id
            timesheet.client_approved_at = now
            timesheet.client_signature = data.signature
            action: str = ShiftLogAction.CLIENT_APPROVAL
            await notification_service.create_for_manager_approval(db, timesheet, shift)
        else:
            if not actor.is_manager:
                raise ForbiddenError("Only managers can give final approval")
            if timesheet.status != TimesheetStatus.PENDING_FINAL_APPROVAL:
                raise InvalidStateError(f"Timesheet is not awaiting final approval (status: {timesheet.status})")

            self._advance(timesheet, TimesheetStatus.COMPLETED)
            timesheet.manager_approved_by = actor.id
            timesheet.manager_approved_at = now
            timesheet.manager_signature = data.signature
            shift.status = ShiftStatus.COMPLETED
            action = ShiftLogAction.MANAGER_APPROVAL

        await shift_log_repository.record(db, shift.id, actor.id, action, {
            "timesheetId": str(timesheet.id),
            "status": timesheet.status,
        })
        await db.flush()

        logger.info("%s approval of timesheet %s by %s -> %s", data.approval_type, timesheet.id, actor.id, timesheet.status)
        return self.to_response(timesheet)

    # --- 조회 (Reads) ---

    async def get_detail(
        self,
        db: AsyncSession,
        actor: User,
        timesheet_id: UUID,
    ) -> TimesheetDetailResponse:
        """타임시트 상세를 조회합니다.

        Envelope, shift summary and one row per worker with total minutes.

        Raises:
            NotFoundError: 타임시트 없음 (Timesheet does not exist)
            ForbiddenError: 열람 권한 없음 (Caller may not view this timesheet)
        """
        timesheet, shift = await self._get_timesheet_and_shift(db, timesheet_id)
        if not await self._can_view(db, actor, shift):
            raise ForbiddenError("Not allowed to view this timesheet")

        assignments: Sequence[Assignment] = await assignment_repository.get_by_shift(db, shift.id, with_entries=True)
        workers: list[TimesheetWorker] = [
            TimesheetWorker(
                assignment_id=str(a.id),
                employee_id=str(a.employee_id) if a.employee_id else None,
                employee_name=a.employee.full_name if a.employee else None,
                role_code=a.role_code,
                status=a.status,
                time_entries=[entry_to_response(e) for e in a.time_entries],
                total_minutes=sum(e.worked_minutes for e in a.time_entries),
            )
            for a in assignments
        ]
        return TimesheetDetailResponse(
            **self.to_response(timesheet).model_dump(),
            shift=shift_service.to_response(shift),
            workers=workers,
            total_minutes=sum(w.total_minutes for w in workers),
        )

    async def list_timesheets(
        self,
        db: AsyncSession,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Page:
        """타임시트 목록 — Paginated timesheets, optionally by status."""
        if status is not None and status not in TimesheetStatus.ALL:
            raise BadRequestError(f"Unknown timesheet status '{status}'")
        items, total = await timesheet_repository.get_filtered(db, status, page, per_page)
        return Page.build([self.to_response(t) for t in items], total, page, per_page)

    # --- 엑셀 내보내기 (Spreadsheet export) ---

    async def export_excel(
        self,
        db: AsyncSession,
        actor: User,
        timesheet_id: UUID,
    ) -> tuple[str, bytes]:
        """타임시트를 Excel 파일로 내보냅니다.

        Build an .xlsx workbook: a header block describing the shift, then
        one row per worker with up to three IN/OUT pairs and total hours.
        Open entries show an empty OUT cell and do not count toward hours.
        Clock times are shown in ``settings.TIMEZONE``.

        Returns:
            tuple[str, bytes]: (파일명, 파일 내용) (Filename, workbook bytes)

        Raises:
            NotFoundError: 타임시트 없음 (Timesheet does not exist)
            ForbiddenError: 관리자/크루 치프만 (Managers and the shift's crew chief only)
        """
        timesheet, shift = await self._get_timesheet_and_shift(db, timesheet_id)
        await permission_service.authorize_shift_action(db, actor, shift)
        assignments: Sequence[Assignment] = await assignment_repository.get_by_shift(db, shift.id, with_entries=True)

        wb = Workbook()
        ws = wb.active
        ws.title = "Timesheet"
        bold = Font(bold=True)
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
        zone = ZoneInfo(settings.TIMEZONE)

        info: list[tuple[str, str]] = [
            ("Client", shift.job.client.company_name),
            ("Job", shift.job.name),
            ("PO Number", shift.job.po_number or ""),
            ("Date", shift.date.isoformat()),
            ("Location", shift.location or ""),
            ("Crew Chief", shift.crew_chief.full_name if shift.crew_chief else ""),
            ("Status", timesheet.status),
            ("Time Zone", settings.TIMEZONE),
        ]
        for label, value in info:
            ws.append([label, value])
            ws.cell(row=ws.max_row, column=1).font = bold
        ws.append([])

        headers: list[str] = ["Worker", "Role"]
        for n in range(1, EXPORT_ENTRY_PAIRS + 1):
            headers += [f"IN {n}", f"OUT {n}"]
        headers.append("Total Hours")
        ws.append(headers)
        header_row: int = ws.max_row
        for col_idx in range(1, len(headers) + 1):
            cell = ws.cell(row=header_row, column=col_idx)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        for a in assignments:
            row: list[str | float] = [a.employee.full_name if a.employee else "(unfilled)", a.role_code]
            entries = {e.entry_number: e for e in a.time_entries}
            for n in range(1, EXPORT_ENTRY_PAIRS + 1):
                entry = entries.get(n)
                row.append(_local_hhmm(entry.clock_in, zone) if entry else "")
                row.append(_local_hhmm(entry.clock_out, zone) if entry else "")
            row.append(round(sum(e.worked_minutes for e in a.time_entries) / 60, 2))
            ws.append(row)

        for i, w in enumerate([24, 8] + [9] * (EXPORT_ENTRY_PAIRS * 2) + [12], 1):
            ws.column_dimensions[ws.cell(row=header_row, column=i).column_letter].width = w

        buffer = BytesIO()
        wb.save(buffer)
        filename: str = f"timesheet-{shift.date.isoformat()}-{str(shift.id)[:8]}.xlsx"
        return filename, buffer.getvalue()

    def to_response(self, timesheet: Timesheet) -> TimesheetResponse:
        """타임시트 ORM → 응답 변환 — Build a TimesheetResponse."""
        return TimesheetResponse(
            id=str(timesheet.id),
            shift_id=str(timesheet.shift_id),
            status=timesheet.status,
            submitted_by=str(timesheet.submitted_by) if timesheet.submitted_by else None,
            submitted_at=timesheet.submitted_at,
            client_approved_by=str(timesheet.client_approved_by) if timesheet.client_approved_by else None,
            client_approved_at=timesheet.client_approved_at,
            manager_approved_by=str(timesheet.manager_approved_by) if timesheet.manager_approved_by else None,
            manager_approved_at=timesheet.manager_approved_at,
        )


# 싱글턴 인스턴스 — Singleton instance
timesheet_service: TimesheetService = TimesheetService()
