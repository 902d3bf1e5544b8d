"""교대 감사 로그 ORM 모델 정의.

Shift audit log model. One row per lifecycle action taken on a shift
(no-show, end shift, clock out all, finalize, approvals).

Tables:
    - shift_logs: 교대 감사 로그 (Append-only audit trail)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class ShiftLogAction:
    """감사 로그 액션 상수 — Audited action names."""

    NO_SHOW = "no_show"
    END_SHIFT = "end_shift"
    END_ALL_SHIFTS = "end_all_shifts"
    CLOCK_OUT_ALL = "clock_out_all"
    FINALIZE = "finalize_timesheet"
    CLIENT_APPROVAL = "client_approval"
    MANAGER_APPROVAL = "manager_approval"


class ShiftLog(Base):
    """교대 감사 로그 모델.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 교대 FK (Shift the action applied to)
        actor_id: 수행자 FK (User who performed the action)
        action: 액션 이름 (Action name, see ShiftLogAction)
        details: 부가 정보 JSON (Action-specific details, e.g. assignment id)
        created_at: 발생 일시 UTC (When the action happened)
    """

    __tablename__ = "shift_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    shift = relationship("Shift", back_populates="logs")
    actor = relationship("User")
