"""교대 감사 로그 레포지토리.

Shift log repository — Append and list audit rows.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crewtime.models.shift_log import ShiftLog
from crewtime.repositories.base import BaseRepository


class ShiftLogRepository(BaseRepository[ShiftLog]):
    """교대 감사 로그 레포지토리.

    Extends:
        BaseRepository[ShiftLog]
    """

    def __init__(self) -> None:
        super().__init__(ShiftLog)

    async def record(
        self,
        db: AsyncSession,
        shift_id: UUID,
        actor_id: UUID | None,
        action: str,
        details: dict[str, Any] | None = None,
    ) -> ShiftLog:
        """감사 로그를 추가합니다 — Append one audit row in the current transaction."""
        log: ShiftLog = ShiftLog(
            shift_id=shift_id,
            actor_id=actor_id,
            action=action,
            details=details,
        )
        db.add(log)
        await db.flush()
        return log

    async def get_by_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
    ) -> Sequence[ShiftLog]:
        """교대의 감사 로그 목록 (최신순) — Audit rows of a shift, newest first."""
        query: Select = (
            select(ShiftLog)
            .options(selectinload(ShiftLog.actor))
            .where(ShiftLog.shift_id == shift_id)
            .order_by(ShiftLog.created_at.desc(), ShiftLog.id)
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
shift_log_repository: ShiftLogRepository = ShiftLogRepository()
