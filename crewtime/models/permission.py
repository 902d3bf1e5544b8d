"""크루 치프 위임 권한 ORM 모델 정의.

Delegated crew-chief permission model.
A manager can let a user act as crew chief on a single shift, on every
shift of a job, or on every shift of a client's jobs.

Tables:
    - crew_chief_permissions: 위임 권한 (Delegated crew-chief grants)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class PermissionType:
    """권한 범위 상수 — Grant scopes, most specific first."""

    SHIFT = "shift"
    JOB = "job"
    CLIENT = "client"

    ALL = (SHIFT, JOB, CLIENT)


class CrewChiefPermission(Base):
    """크루 치프 위임 권한 모델.

    Delegated crew-chief grant. A grant is active while `revoked_at` is NULL;
    revoking stamps the time instead of deleting the row.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 권한 보유자 FK (Grantee)
        permission_type: 범위 (shift / job / client)
        target_id: 대상 ID (Shift, job or client id, depending on the scope)
        granted_by: 부여한 관리자 FK (Granting manager)
        granted_at: 부여 일시 (Grant timestamp)
        revoked_at: 회수 일시, 활성이면 NULL (Revocation timestamp, NULL while active)
    """

    __tablename__ = "crew_chief_permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # 대상 ID — polymorphic target, no FK (shifts / jobs / clients)
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    granted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_crew_chief_permissions_lookup", "user_id", "permission_type", "target_id"),
    )

    user = relationship("User", foreign_keys=[user_id])
