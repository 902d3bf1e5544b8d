"""크루 치프 위임 권한 레포지토리.

Crew-chief permission repository — Active grant lookups.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.permission import CrewChiefPermission
from crewtime.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[CrewChiefPermission]):
    """위임 권한 레포지토리.

    Extends:
        BaseRepository[CrewChiefPermission]
    """

    def __init__(self) -> None:
        super().__init__(CrewChiefPermission)

    async def get_active_grant(
        self,
        db: AsyncSession,
        user_id: UUID,
        permission_type: str,
        target_id: UUID,
    ) -> CrewChiefPermission | None:
        """활성 권한 한 건을 조회합니다.

        Retrieve the active (unrevoked) grant for the exact user, scope and
        target, if any.
        """
        query: Select = (
            select(CrewChiefPermission)
            .where(CrewChiefPermission.user_id == user_id)
            .where(CrewChiefPermission.permission_type == permission_type)
            .where(CrewChiefPermission.target_id == target_id)
            .where(CrewChiefPermission.revoked_at.is_(None))
            .order_by(CrewChiefPermission.granted_at.desc())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_active_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Sequence[CrewChiefPermission]:
        """사용자의 활성 권한 목록 — Every active grant held by the user."""
        query: Select = (
            select(CrewChiefPermission)
            .where(CrewChiefPermission.user_id == user_id)
            .where(CrewChiefPermission.revoked_at.is_(None))
            .order_by(CrewChiefPermission.granted_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
permission_repository: PermissionRepository = PermissionRepository()
