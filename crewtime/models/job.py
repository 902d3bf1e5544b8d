"""고객사/작업/교대 관련 SQLAlchemy ORM 모델 정의.

Client, Job and Shift SQLAlchemy ORM model definitions.
A client company requests staffing; a manager opens a job for the client
and schedules one or more shifts under it.

Tables:
    - clients: 고객사 (Client companies requesting staff)
    - jobs: 작업 (Jobs opened for a client)
    - shifts: 교대 근무 (Scheduled work periods under a job)
    - worker_requirements: 역할별 필요 인원 (Per-role headcount requested for a shift)
"""

import uuid
import datetime as dt

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, Time, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class ShiftStatus:
    """교대 상태 상수 — Shift status values."""

    UPCOMING = "Upcoming"
    IN_PROGRESS = "In Progress"
    PENDING_APPROVAL = "Pending Approval"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    ALL = (UPCOMING, IN_PROGRESS, PENDING_APPROVAL, COMPLETED, CANCELLED)
    # 확정 이후 상태 — No assignment or clock action is accepted on these
    CLOSED = (PENDING_APPROVAL, COMPLETED, CANCELLED)


class Client(Base):
    """고객사 모델.

    Client company model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_name: 회사명 (Company name)
        contact_name: 담당자 이름 (Contact person, optional)
        contact_email: 담당자 이메일 (Contact email, optional)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))

    jobs = relationship("Job", back_populates="client", cascade="all, delete-orphan")


class Job(Base):
    """작업 모델 — 고객사 요청 단위.

    Job model — One staffing engagement for a client.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        client_id: 고객사 FK (Owning client)
        name: 작업 이름 (Job name)
        po_number: 구매 주문 번호 (Purchase order number, optional)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    po_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))

    client = relationship("Client", back_populates="jobs")
    shifts = relationship("Shift", back_populates="job", cascade="all, delete-orphan")


class Shift(Base):
    """교대 근무 모델 — 작업 하위의 예정된 근무 시간.

    Shift model — A scheduled work period tied to a job.
    Owns its assignments (and through them the time entries), its single
    timesheet and its audit log; deleting a shift cascades to all of them.

    Status flow: Upcoming -> In Progress -> Completed (Cancelled at any time)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        job_id: 작업 FK (Parent job)
        date: 근무 날짜 (Work date)
        start_time: 시작 시각 (Scheduled start)
        end_time: 종료 시각 (Scheduled end)
        location: 장소 (Venue / address)
        crew_chief_id: 지정 크루 치프 FK (Designated crew chief, optional)
        requested_workers: 요청 인원 (Requested worker count)
        status: 상태 (Upcoming / In Progress / Pending Approval / Completed / Cancelled)
        notes: 메모 (Free-form notes)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 지정 크루 치프 — Designated crew chief (사용자 삭제 시 NULL)
    crew_chief_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    requested_workers: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(30), default=ShiftStatus.UPCOMING, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc), onupdate=lambda: dt.datetime.now(dt.timezone.utc))

    # 관계 — Relationships (cascade: 교대 삭제 시 하위 데이터 일괄 삭제)
    job = relationship("Job", back_populates="shifts")
    crew_chief = relationship("User", foreign_keys=[crew_chief_id])
    assignments = relationship("Assignment", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True)
    timesheet = relationship("Timesheet", back_populates="shift", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    logs = relationship("ShiftLog", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True)
    worker_requirements = relationship(
        "WorkerRequirement", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True,
        order_by="WorkerRequirement.role_code",
    )


class WorkerRequirement(Base):
    """역할별 필요 인원 모델.

    How many workers of one role code a shift asks for. The rows of a shift
    are replaced as a set, and `shifts.requested_workers` holds their sum.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 교대 FK (Owning shift)
        role_code: 역할 코드 CC/SH/FO/RFO/RG/GL (Role code)
        required_count: 필요 인원 (Workers needed for the role)
    """

    __tablename__ = "worker_requirements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    role_code: Mapped[str] = mapped_column(String(5), nullable=False)
    required_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    shift = relationship("Shift", back_populates="worker_requirements")

    __table_args__ = (
        UniqueConstraint("shift_id", "role_code", name="uq_worker_requirement_role"),
        CheckConstraint("required_count >= 0", name="ck_worker_requirement_count"),
    )
