"""타임시트 SQLAlchemy ORM 모델 정의.

Timesheet SQLAlchemy ORM model definitions.
A timesheet is the approval envelope for the time worked on one shift.
It is created when the crew chief finalizes the shift and then travels
forward through client approval and manager approval.

Tables:
    - timesheets: 타임시트 (One approval envelope per shift)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class TimesheetStatus:
    """타임시트 상태 상수 — Timesheet status values, ordered by rank.

    Status only ever moves forward:
        pending_client_approval -> pending_final_approval -> completed
    pending_manager_approval keeps its rank slot for stored rows but no
    transition produces it.
    """

    PENDING_CLIENT_APPROVAL = "pending_client_approval"
    PENDING_MANAGER_APPROVAL = "pending_manager_approval"
    PENDING_FINAL_APPROVAL = "pending_final_approval"
    COMPLETED = "completed"

    ALL = (PENDING_CLIENT_APPROVAL, PENDING_MANAGER_APPROVAL, PENDING_FINAL_APPROVAL, COMPLETED)

    @classmethod
    def rank(cls, status: str) -> int:
        """상태 순위 반환 — Position of `status` in the approval chain."""
        return cls.ALL.index(status)


class Timesheet(Base):
    """타임시트 모델 — 교대 1건당 최대 1개.

    Timesheet model — At most one per shift (unique shift_id).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 교대 FK, 고유 (Owning shift, unique)
        status: 승인 상태 (Approval status, see TimesheetStatus)
        submitted_by: 확정한 사용자 FK (User who finalized the shift)
        submitted_at: 확정 일시 (Finalization timestamp)
        client_approved_by: 고객 승인자 FK (Client approver)
        client_approved_at: 고객 승인 일시 (Client approval timestamp)
        client_signature: 고객 서명 (Client signature payload)
        manager_approved_by: 관리자 승인자 FK (Manager approver)
        manager_approved_at: 관리자 승인 일시 (Manager approval timestamp)
        manager_signature: 관리자 서명 (Manager signature payload)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "timesheets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(30), default=TimesheetStatus.PENDING_CLIENT_APPROVAL, nullable=False)
    submitted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    client_approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    client_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    client_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    manager_approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    manager_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    manager_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    shift = relationship("Shift", back_populates="timesheet")
