"""고객사/작업/교대 관련 Pydantic 요청/응답 스키마 정의.

Client, Job and Shift Pydantic request/response schema definitions.
Shift-scoped extras such as the audit log entry, the per-role worker
requirements and the double-booking check live here as well.
"""

import datetime as dt
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from crewtime.models.assignment import ROLE_CODES
from crewtime.schemas.common import CamelModel


# === 고객사 (Client) 스키마 ===

class ClientCreate(CamelModel):
    """고객사 생성 요청 스키마 — Client creation request."""

    company_name: str = Field(min_length=1, max_length=255)
    contact_name: str | None = None
    contact_email: str | None = None


class ClientResponse(CamelModel):
    """고객사 응답 스키마 — Client response."""

    id: str
    company_name: str
    contact_name: str | None
    contact_email: str | None


# === 작업 (Job) 스키마 ===

class JobCreate(CamelModel):
    """작업 생성 요청 스키마.

    Attributes:
        client_id: 고객사 UUID (Owning client)
        name: 작업 이름 (Job name)
        po_number: 구매 주문 번호 (Purchase order number, optional)
    """

    client_id: UUID
    name: str = Field(min_length=1, max_length=255)
    po_number: str | None = None


class JobResponse(CamelModel):
    """작업 응답 스키마 — Job response."""

    id: str
    client_id: str
    name: str
    po_number: str | None


# === 교대 (Shift) 스키마 ===

class ShiftCreate(CamelModel):
    """교대 생성 요청 스키마.

    Shift creation request. New shifts always start as Upcoming.

    Attributes:
        job_id: 작업 UUID (Parent job)
        date: 근무 날짜 (Work date)
        start_time: 시작 시각 (Scheduled start, HH:MM)
        end_time: 종료 시각 (Scheduled end, HH:MM)
        location: 장소 (Venue, optional)
        crew_chief_id: 크루 치프 UUID (Designated crew chief, optional)
        requested_workers: 요청 인원 (Requested worker count)
        notes: 메모 (Notes, optional)
    """

    job_id: UUID
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str | None = None
    crew_chief_id: UUID | None = None
    requested_workers: int = Field(default=1, ge=1)
    notes: str | None = None


class TimesheetSummary(CamelModel):
    """교대 응답에 포함되는 타임시트 요약 — Timesheet summary embedded in a shift."""

    id: str
    status: str
    submitted_at: dt.datetime | None


class ShiftResponse(CamelModel):
    """교대 응답 스키마.

    Shift response with job, client and crew chief names flattened in.
    """

    id: str
    job_id: str
    job_name: str
    client_id: str
    client_name: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str | None
    crew_chief_id: str | None
    crew_chief_name: str | None
    requested_workers: int
    status: str
    notes: str | None
    timesheet: TimesheetSummary | None = None


# === 감사 로그 (Shift log) 스키마 ===

class ShiftLogResponse(CamelModel):
    """교대 감사 로그 응답 스키마.

    Attributes:
        id: 로그 UUID (Log entry identifier)
        action: 액션 이름 (Action name)
        actor_id: 수행자 UUID (Acting user, nullable)
        actor_name: 수행자 이름 (Acting user's name, nullable)
        details: 부가 정보 (Action details)
        created_at: 발생 일시 (Timestamp)
    """

    id: str
    action: str
    actor_id: str | None
    actor_name: str | None
    details: dict[str, Any] | None
    created_at: dt.datetime


# === 역할별 필요 인원 (Worker requirements) 스키마 ===

class WorkerRequirementItem(CamelModel):
    """역할 하나의 필요 인원.

    Attributes:
        role_code: 역할 코드 (CC/SH/FO/RFO/RG/GL, case-insensitive)
        required_count: 필요 인원, 0 이상 (Workers needed, zero allowed)
    """

    role_code: str
    required_count: int = Field(ge=0)

    @field_validator("role_code")
    @classmethod
    def _known_role_code(cls, value: str) -> str:
        code: str = value.strip().upper()
        if code not in ROLE_CODES:
            raise ValueError(f"Unknown role code '{value}'")
        return code


class WorkerRequirementsUpdate(CamelModel):
    """필요 인원 전체 교체 요청 — The full new set; roles left out are dropped."""

    worker_requirements: list[WorkerRequirementItem]

    @model_validator(mode="after")
    def _unique_role_codes(self) -> "WorkerRequirementsUpdate":
        codes: list[str] = [item.role_code for item in self.worker_requirements]
        if len(codes) != len(set(codes)):
            raise ValueError("Each role code may appear only once")
        return self


class WorkerRequirementResponse(CamelModel):
    """역할별 필요 인원과 현재 채워진 슬롯 수."""

    role_code: str
    role_label: str
    required_count: int
    assigned_count: int


class WorkerRequirementsResponse(CamelModel):
    """교대 필요 인원 응답.

    Attributes:
        shift_id: 교대 UUID (Shift identifier)
        requested_workers: 전체 요청 인원 (Sum of required counts)
        worker_requirements: 역할 코드순 목록 (Per-role rows ordered by role code)
    """

    shift_id: str
    requested_workers: int
    worker_requirements: list[WorkerRequirementResponse]


# === 중복 배정 검사 (Double-booking check) 스키마 ===

class ConflictCheckRequest(CamelModel):
    """중복 배정 검사 요청 — Employee to check against the shift's time window."""

    employee_id: UUID


class ShiftConflict(CamelModel):
    """겹치는 다른 교대의 배정 하나."""

    shift_id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    job_name: str
    client_name: str
    role_code: str


class ConflictCheckResponse(CamelModel):
    """중복 배정 검사 결과.

    Attributes:
        has_conflicts: 겹치는 배정 존재 여부 (Whether any overlap was found)
        conflicts: 겹치는 배정 목록 (Overlapping assignments on other shifts)
    """

    has_conflicts: bool
    conflicts: list[ShiftConflict]
