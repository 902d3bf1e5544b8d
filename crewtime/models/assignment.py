"""교대 배정 및 출퇴근 기록 SQLAlchemy ORM 모델 정의.

Shift assignment and time entry SQLAlchemy ORM model definitions.
An assignment places one worker (or an empty placeholder slot) on a shift
in a given role; each clock-in opens a time entry under the assignment and
each clock-out closes it.

Tables:
    - assignments: 교대 배정 (One worker's placement on one shift)
    - time_entries: 출퇴근 기록 (Clock-in/clock-out pairs, up to 3 per assignment)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class AssignmentStatus:
    """배정 상태 상수 — Assignment status values.

    State machine:
        not_started --clock_in--> clocked_in --clock_out--> clocked_out --clock_in--> clocked_in
        not_started --no_show--> no_show [terminal]
        clocked_in | clocked_out --end_shift--> shift_ended [terminal]
    """

    NOT_STARTED = "not_started"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"
    SHIFT_ENDED = "shift_ended"
    NO_SHOW = "no_show"

    ALL = (NOT_STARTED, CLOCKED_IN, CLOCKED_OUT, SHIFT_ENDED, NO_SHOW)
    # 종료 상태 — Terminal states; no clock action is accepted afterwards
    TERMINAL = (SHIFT_ENDED, NO_SHOW)


# 역할 코드 → 기본 표시 이름 — Role code to default role label
ROLE_CODES: dict[str, str] = {
    "CC": "Crew Chief",
    "SH": "Stage Hand",
    "FO": "Fork Operator",
    "RFO": "Reach Fork Operator",
    "RG": "Rigger",
    "GL": "General Labor",
}


class Assignment(Base):
    """교대 배정 모델 — 한 작업자의 교대 배치.

    Assignment model — One worker's placement on one shift.
    `employee_id` may be NULL for an unfilled placeholder slot; `status` is
    the single authoritative lifecycle field and is only changed by the time
    entry ledger operations.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 교대 FK (Owning shift)
        employee_id: 작업자 FK, 빈 슬롯이면 NULL (Worker, NULL for placeholder)
        role_code: 역할 코드 (CC, SH, FO, RFO, RG, GL)
        role_label: 역할 표시 이름 (Role label shown on the timesheet)
        status: 상태 (not_started / clocked_in / clocked_out / shift_ended / no_show)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Constraints:
        uq_assignment_shift_employee: 교대당 동일 작업자 1회만 배정
            (An employee appears at most once per shift; NULLs are exempt)
    """

    __tablename__ = "assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    role_code: Mapped[str] = mapped_column(String(5), nullable=False)
    role_label: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=AssignmentStatus.NOT_STARTED, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("shift_id", "employee_id", name="uq_assignment_shift_employee"),
    )

    shift = relationship("Shift", back_populates="assignments")
    employee = relationship("User")
    time_entries = relationship(
        "TimeEntry",
        back_populates="assignment",
        order_by="TimeEntry.entry_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TimeEntry(Base):
    """출퇴근 기록 모델 — 출근/퇴근 한 쌍.

    Time entry model — One clock-in/clock-out pair under an assignment.
    `clock_out` NULL together with `is_active` True marks the open entry;
    entries are closed, never deleted.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        assignment_id: 배정 FK (Owning assignment)
        entry_number: 기록 번호 1..3 (Lowest unused number at clock-in)
        clock_in: 출근 시각 (Clock-in timestamp)
        clock_out: 퇴근 시각, 진행 중이면 NULL (Clock-out timestamp, NULL while active)
        is_active: 진행 중 여부 (Whether the entry is still open)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Constraints:
        uq_time_entry_number: 배정 내 기록 번호 고유 (Entry numbers unique per assignment)
        ck_time_entry_number_range: 기록 번호 1..3 (Entry numbers stay within the three export columns)
        uq_time_entry_one_active: 배정당 진행 중 기록 최대 1개
            (Partial unique index; at most one active entry per assignment, even under race)
    """

    __tablename__ = "time_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    assignment_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)
    entry_number: Mapped[int] = mapped_column(Integer, nullable=False)
    clock_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("assignment_id", "entry_number", name="uq_time_entry_number"),
        CheckConstraint("entry_number >= 1 AND entry_number <= 3", name="ck_time_entry_number_range"),
        Index(
            "uq_time_entry_one_active",
            "assignment_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    assignment = relationship("Assignment", back_populates="time_entries")

    @property
    def worked_minutes(self) -> int:
        """종료된 기록의 근무 시간(분) — Minutes worked; 0 while the entry is open."""
        if self.clock_out is None:
            return 0
        return int((_as_utc(self.clock_out) - _as_utc(self.clock_in)).total_seconds() // 60)


def _as_utc(value: datetime) -> datetime:
    # SQLite는 tz 정보를 버림 — naive values read back from SQLite are UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
