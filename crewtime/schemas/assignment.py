"""교대 배정 및 출퇴근 관련 Pydantic 요청/응답 스키마 정의.

Assignment and time entry Pydantic request/response schema definitions.
Lifecycle endpoints identify the worker by ``workerId``, which is the
assignment id (one worker's slot on the shift).
"""

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from crewtime.models.assignment import ROLE_CODES
from crewtime.schemas.common import CamelModel, SuccessResponse


# === 요청 (Request) 스키마 ===

class AssignRequest(CamelModel):
    """교대 배정 생성 요청 스키마.

    Create an assignment slot on a shift. A null employee creates a
    placeholder slot to be filled later via assign-worker.

    Attributes:
        employee_id: 작업자 UUID, 빈 슬롯이면 null (Worker, null for placeholder)
        role_code: 역할 코드 (CC, SH, FO, RFO, RG, GL)
        role_label: 역할 표시 이름, 생략 시 코드 기본값 (Defaults from the role code)
    """

    employee_id: UUID | None = None
    role_code: str
    role_label: str | None = None

    @field_validator("role_code")
    @classmethod
    def _known_role_code(cls, value: str) -> str:
        code: str = value.strip().upper()
        if code not in ROLE_CODES:
            raise ValueError(f"Unknown role code '{value}'")
        return code


class AssignWorkerRequest(CamelModel):
    """기존 슬롯에 작업자 배정 요청 스키마.

    Attributes:
        assignment_id: 배정 슬롯 UUID (Slot to fill or move)
        employee_id: 새 작업자 UUID (Employee to place in the slot)
    """

    assignment_id: UUID
    employee_id: UUID


class WorkerActionRequest(CamelModel):
    """작업자 단위 액션 요청 스키마 — clock-in, clock-out, end-shift, no-show.

    Attributes:
        worker_id: 배정 UUID (Assignment id of the worker)
    """

    worker_id: UUID


# === 응답 (Response) 스키마 ===

class TimeEntryResponse(CamelModel):
    """출퇴근 기록 응답 스키마.

    Attributes:
        id: 기록 UUID (Entry identifier)
        entry_number: 기록 번호 1..3 (Entry number)
        clock_in: 출근 시각 (Clock-in time)
        clock_out: 퇴근 시각, 진행 중이면 null (Clock-out time, null while active)
        is_active: 진행 중 여부 (Open entry flag)
    """

    id: str
    entry_number: int
    clock_in: datetime
    clock_out: datetime | None
    is_active: bool


class AssignmentResponse(CamelModel):
    """교대 배정 응답 스키마.

    Assignment with its time entries in entry-number order. `status` is the
    stored lifecycle field, never recomputed from the entries.
    """

    id: str
    shift_id: str
    employee_id: str | None
    employee_name: str | None
    role_code: str
    role_label: str
    status: str
    time_entries: list[TimeEntryResponse] = []


class ClockActionResponse(SuccessResponse):
    """출퇴근/종료/결근 액션 응답 스키마.

    Attributes:
        assignment_id: 배정 UUID (Acted-on assignment)
        status: 변경된 배정 상태 (Assignment status after the action)
        entry: 생성 또는 종료된 기록 (Opened or closed entry, if any)
    """

    assignment_id: str
    status: str
    entry: TimeEntryResponse | None = None


class ClockedOutWorker(CamelModel):
    """일괄 퇴근 처리된 작업자 — One worker closed by clock-out-all."""

    assignment_id: str
    employee_id: str | None
    employee_name: str | None
    clock_out: datetime


class ClockOutAllResponse(SuccessResponse):
    """일괄 퇴근 응답 스키마.

    Attributes:
        clocked_out_count: 퇴근 처리 인원 (Number of entries closed; 0 is a success)
        clocked_out_workers: 퇴근 처리 목록 (Workers that were clocked out)
    """

    clocked_out_count: int
    clocked_out_workers: list[ClockedOutWorker]


class EndAllShiftsResponse(SuccessResponse):
    """전체 교대 종료 응답 스키마 — ended_count is the number of assignments moved to shift_ended."""

    ended_count: int


class FinalizeResponse(SuccessResponse):
    """타임시트 확정 응답 스키마.

    Attributes:
        timesheet_id: 타임시트 UUID (Created or updated timesheet)
        status: 타임시트 상태 (Timesheet status after finalize)
    """

    timesheet_id: str
    status: str
