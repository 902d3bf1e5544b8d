"""타임시트 라우터 — 조회, 승인, 엑셀 내보내기.

Timesheets Router — Listing, detail, the client/manager approval chain,
and the spreadsheet export.
"""

from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import get_current_user, require_manager
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.timesheet import ApproveRequest, TimesheetDetailResponse, TimesheetResponse
from crewtime.services.timesheet_service import timesheet_service
from crewtime.utils.pagination import Page

router: APIRouter = APIRouter()


@router.get("", response_model=Page)
async def list_timesheets(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(alias="perPage", ge=1, le=100)] = 20,
) -> Page:
    """타임시트 목록 (상태 필터). Manager 이상."""
    return await timesheet_service.list_timesheets(db, status=status, page=page, per_page=per_page)


@router.get("/{timesheet_id}", response_model=TimesheetDetailResponse)
async def get_timesheet(
    timesheet_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TimesheetDetailResponse:
    """타임시트 상세 — 교대 요약과 작업자별 기록/총 근무 시간.

    Timesheet detail with shift summary and per-worker time entries.
    """
    return await timesheet_service.get_detail(db, current_user, timesheet_id)


@router.post("/{timesheet_id}/approve", response_model=TimesheetResponse)
async def approve_timesheet(
    timesheet_id: UUID,
    data: ApproveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TimesheetResponse:
    """타임시트 승인 — approvalType "client" 또는 "manager".

    Advance the approval chain by one step.
    """
    result: TimesheetResponse = await timesheet_service.approve(db, current_user, timesheet_id, data)
    await db.commit()
    return result


@router.get("/{timesheet_id}/export")
async def export_timesheet(
    timesheet_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> StreamingResponse:
    """타임시트를 Excel 파일로 내보냅니다. 관리자 또는 크루 치프."""
    filename, content = await timesheet_service.export_excel(db, current_user, timesheet_id)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
