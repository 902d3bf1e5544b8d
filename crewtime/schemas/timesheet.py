"""타임시트 관련 Pydantic 요청/응답 스키마 정의.

Timesheet Pydantic request/response schema definitions — approval
requests, the envelope, and the per-worker detail view.
"""

from datetime import datetime

from crewtime.schemas.assignment import TimeEntryResponse
from crewtime.schemas.common import CamelModel
from crewtime.schemas.shift import ShiftResponse


class ApproveRequest(CamelModel):
    """타임시트 승인 요청 스키마.

    Attributes:
        approval_type: 승인 단계 ("client" | "manager")
        signature: 서명 데이터 (Signature payload, optional)
    """

    approval_type: str
    signature: str | None = None


class TimesheetResponse(CamelModel):
    """타임시트 응답 스키마 — The approval envelope."""

    id: str
    shift_id: str
    status: str
    submitted_by: str | None
    submitted_at: datetime | None
    client_approved_by: str | None
    client_approved_at: datetime | None
    manager_approved_by: str | None
    manager_approved_at: datetime | None


class TimesheetWorker(CamelModel):
    """타임시트 작업자 행.

    One worker row of a timesheet.

    Attributes:
        assignment_id: 배정 UUID (Assignment identifier)
        employee_id: 작업자 UUID (Worker, null for an empty slot)
        employee_name: 작업자 이름 (Worker name)
        role_code: 역할 코드 (Role code)
        status: 배정 상태 (Assignment status)
        time_entries: 출퇴근 기록 (Entries in entry-number order)
        total_minutes: 종료된 기록의 총 근무 시간(분) (Minutes over closed entries)
    """

    assignment_id: str
    employee_id: str | None
    employee_name: str | None
    role_code: str
    status: str
    time_entries: list[TimeEntryResponse]
    total_minutes: int


class TimesheetDetailResponse(TimesheetResponse):
    """타임시트 상세 응답 스키마 — Envelope plus shift summary and worker rows."""

    shift: ShiftResponse
    workers: list[TimesheetWorker]
    total_minutes: int
