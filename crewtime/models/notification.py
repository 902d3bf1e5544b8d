"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Each notification can reference the entity that triggered it via
reference_type and reference_id.

Tables:
    - notifications: 사용자 알림 (User notifications with polymorphic references)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from crewtime.database import Base


class Notification(Base):
    """알림 모델 — 사용자에게 전달되는 시스템 알림.

    Notification Types (type 필드 값):
        - "shift_assigned": 교대 배정 알림 (Worker placed on a shift)
        - "timesheet_ready_for_approval": 최종 승인 대기 (Client approved; manager sign-off due)

    Reference Types (reference_type 필드 값):
        - "shift": Shift 참조
        - "timesheet": Timesheet 참조

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 수신자 FK (Recipient user foreign key)
        type: 알림 유형 (Notification type, see above)
        message: 알림 메시지 (Human-readable notification message)
        reference_type: 참조 엔티티 유형 (Referenced entity kind)
        reference_id: 참조 엔티티 ID (Referenced entity UUID)
        is_read: 읽음 여부 (Whether the user has read this notification)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 수신자 FK — Target user who receives this notification
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    # 참조 엔티티 — Polymorphic reference (shift | timesheet)
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 읽음 여부 — False=미읽음, True=읽음 (Unread by default)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
