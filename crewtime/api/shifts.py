"""교대 라우터 — 교대 CRUD, 배정, 출퇴근, 타임시트 확정.

Shifts Router — Shift CRUD plus every per-shift lifecycle action:
assignment store, time entry ledger and timesheet finalization.

Manager-only endpoints use ``require_manager``; lifecycle endpoints take
any authenticated user and the services apply the shift permission guard
(manager, designated crew chief, or delegated grant) before any write.
Each mutating endpoint commits once, so every action is one transaction.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import get_current_user, require_manager
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.assignment import (
    AssignmentResponse,
    AssignRequest,
    AssignWorkerRequest,
    ClockActionResponse,
    ClockOutAllResponse,
    EndAllShiftsResponse,
    FinalizeResponse,
    WorkerActionRequest,
)
from crewtime.schemas.common import SuccessResponse
from crewtime.schemas.shift import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ShiftCreate,
    ShiftLogResponse,
    ShiftResponse,
    WorkerRequirementsResponse,
    WorkerRequirementsUpdate,
)
from crewtime.services.assignment_service import assignment_service
from crewtime.services.shift_service import shift_service
from crewtime.services.time_entry_service import time_entry_service
from crewtime.services.timesheet_service import timesheet_service
from crewtime.utils.pagination import Page

router: APIRouter = APIRouter()


# === 교대 (Shift) CRUD ===

@router.get("", response_model=Page)
async def list_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    job_id: Annotated[UUID | None, Query(alias="jobId")] = None,
    shift_date: Annotated[date | None, Query(alias="date")] = None,
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(alias="perPage", ge=1, le=100)] = 20,
) -> Page:
    """교대 목록 조회 — 작업/날짜/상태 필터, 페이지네이션.

    List shifts filtered by job, date and status, newest date first.
    """
    return await shift_service.list_shifts(
        db, job_id=job_id, shift_date=shift_date, status=status, page=page, per_page=per_page
    )


@router.post("", response_model=ShiftResponse, status_code=201)
async def create_shift(
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ShiftResponse:
    """교대 생성 (상태 Upcoming). Manager 이상."""
    result: ShiftResponse = await shift_service.create_shift(db, data)
    await db.commit()
    return result


@router.get("/{shift_id}", response_model=ShiftResponse)
async def get_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ShiftResponse:
    """교대 상세 조회 — 타임시트 요약 포함.

    Get a shift with its timesheet summary.
    """
    return await shift_service.get_shift(db, shift_id)


@router.delete("/{shift_id}", response_model=SuccessResponse)
async def delete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    confirm: Annotated[bool, Query()] = False,
) -> SuccessResponse:
    """교대 영구 삭제 — confirm=true 필요. 배정/기록/타임시트/로그 연쇄 삭제.

    Hard-delete a shift and, by cascade, everything recorded under it.
    Requires ``confirm=true``.
    """
    await shift_service.delete_shift(db, shift_id, current_user, confirm=confirm)
    await db.commit()
    return SuccessResponse(message="Shift deleted")


@router.get("/{shift_id}/logs", response_model=list[ShiftLogResponse])
async def list_shift_logs(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[ShiftLogResponse]:
    """교대 감사 로그 조회 (최신순). 관리자 또는 크루 치프."""
    return await shift_service.list_logs(db, shift_id, current_user)


# === 역할별 필요 인원 (Worker requirements) ===

@router.get("/{shift_id}/worker-requirements", response_model=WorkerRequirementsResponse)
async def get_worker_requirements(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> WorkerRequirementsResponse:
    """역할별 필요 인원 조회 — 역할 코드순, 채워진 슬롯 수 포함."""
    return await shift_service.get_worker_requirements(db, shift_id)


@router.put("/{shift_id}/worker-requirements", response_model=WorkerRequirementsResponse)
async def set_worker_requirements(
    shift_id: UUID,
    data: WorkerRequirementsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> WorkerRequirementsResponse:
    """역할별 필요 인원 교체. Manager 이상.

    Replace the per-role requirements; requestedWorkers becomes their sum.
    """
    result: WorkerRequirementsResponse = await shift_service.set_worker_requirements(
        db, shift_id, data, current_user
    )
    await db.commit()
    return result


# === 배정 (Assignment) ===

@router.post("/{shift_id}/assign", response_model=AssignmentResponse, status_code=201)
async def assign(
    shift_id: UUID,
    data: AssignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> AssignmentResponse:
    """작업자 배정 — employeeId가 null이면 빈 슬롯 생성.

    Create an assignment slot; a null employee makes a placeholder.
    """
    result: AssignmentResponse = await assignment_service.assign(db, current_user, shift_id, data)
    await db.commit()
    return result


@router.get("/{shift_id}/assigned", response_model=list[AssignmentResponse])
async def list_assigned(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[AssignmentResponse]:
    """교대 배정 목록 — 출퇴근 기록 포함.

    List every assignment of the shift with its time entries.
    """
    return await assignment_service.list_assigned(db, shift_id)


@router.post("/{shift_id}/check-conflicts", response_model=ConflictCheckResponse)
async def check_conflicts(
    shift_id: UUID,
    data: ConflictCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ConflictCheckResponse:
    """중복 배정 검사 — 같은 시간대 다른 교대에 배정된 내역.

    Report the employee's assignments on other shifts that overlap this
    one. Read-only; assigning would be refused with 409 in the same case.
    """
    return await assignment_service.check_conflicts(db, current_user, shift_id, data)


@router.post("/{shift_id}/assign-worker", response_model=SuccessResponse)
async def assign_worker(
    shift_id: UUID,
    data: AssignWorkerRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    """기존 슬롯에 작업자 재배정.

    Put an employee into an existing slot.
    """
    result: SuccessResponse = await assignment_service.reassign(db, current_user, shift_id, data)
    await db.commit()
    return result


@router.delete("/{shift_id}/assigned/{assignment_id}", response_model=SuccessResponse)
async def unassign(
    shift_id: UUID,
    assignment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    """배정 해제 — 출퇴근 기록이 있으면 400.

    Remove an assignment that has no time entries.
    """
    result: SuccessResponse = await assignment_service.unassign(db, current_user, shift_id, assignment_id)
    await db.commit()
    return result


# === 출퇴근 (Time entries) ===

@router.post("/{shift_id}/clock-in", response_model=ClockActionResponse)
async def clock_in(
    shift_id: UUID,
    data: WorkerActionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClockActionResponse:
    """작업자 출근 처리 — Clock a worker in."""
    result: ClockActionResponse = await time_entry_service.clock_in(db, current_user, shift_id, data.worker_id)
    await db.commit()
    return result


@router.post("/{shift_id}/clock-out", response_model=ClockActionResponse)
async def clock_out(
    shift_id: UUID,
    data: WorkerActionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClockActionResponse:
    """작업자 퇴근 처리 — Clock a worker out."""
    result: ClockActionResponse = await time_entry_service.clock_out(db, current_user, shift_id, data.worker_id)
    await db.commit()
    return result


@router.post("/{shift_id}/clock-out-all", response_model=ClockOutAllResponse)
async def clock_out_all(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClockOutAllResponse:
    """교대 전체 퇴근 처리 — Close every active entry on the shift."""
    result: ClockOutAllResponse = await time_entry_service.clock_out_all(db, current_user, shift_id)
    await db.commit()
    return result


@router.post("/{shift_id}/end-shift", response_model=ClockActionResponse)
async def end_shift(
    shift_id: UUID,
    data: WorkerActionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClockActionResponse:
    """작업자 교대 종료 — End one worker's shift."""
    result: ClockActionResponse = await time_entry_service.end_shift(db, current_user, shift_id, data.worker_id)
    await db.commit()
    return result


@router.post("/{shift_id}/end-all-shifts", response_model=EndAllShiftsResponse)
async def end_all_shifts(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> EndAllShiftsResponse:
    """전체 작업자 교대 종료 (단일 트랜잭션) — End every worker's shift atomically."""
    result: EndAllShiftsResponse = await time_entry_service.end_all_shifts(db, current_user, shift_id)
    await db.commit()
    return result


@router.post("/{shift_id}/no-show", response_model=ClockActionResponse)
async def mark_no_show(
    shift_id: UUID,
    data: WorkerActionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClockActionResponse:
    """결근 처리 — Mark a worker who never clocked in as a no-show."""
    result: ClockActionResponse = await time_entry_service.mark_no_show(db, current_user, shift_id, data.worker_id)
    await db.commit()
    return result


# === 타임시트 확정 (Finalization) ===

@router.post("/{shift_id}/finalize-timesheet", response_model=FinalizeResponse)
async def finalize_timesheet(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> FinalizeResponse:
    """타임시트 확정 — 모든 작업자 종료 후 고객 승인 대기로 제출.

    Submit the shift's timesheet for client approval once every worker is
    shift_ended or no_show.
    """
    result: FinalizeResponse = await timesheet_service.finalize(db, current_user, shift_id)
    await db.commit()
    return result
