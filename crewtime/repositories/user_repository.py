"""사용자 레포지토리 — 사용자 및 역할 조회.

User Repository — User lookups with the role eager-loaded, filtered listing
and role lookup for user management, and manager discovery for
notifications.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crewtime.models.user import Role, RoleLevel, User
from crewtime.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_with_role(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> User | None:
        """역할을 포함하여 사용자를 조회합니다.

        Retrieve a user with the role relationship eager-loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            User | None: 사용자 또는 None (User or None)
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.id == user_id)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_active_managers(
        self,
        db: AsyncSession,
    ) -> Sequence[User]:
        """활성 관리자/어드민 목록을 조회합니다.

        Retrieve every active user whose role level is manager or above.
        """
        query: Select = (
            select(User)
            .join(Role, Role.id == User.role_id)
            .where(Role.level <= RoleLevel.MANAGER)
            .where(User.is_active.is_(True))
            .order_by(User.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_filtered(
        self,
        db: AsyncSession,
        role_name: str | None = None,
        is_active: bool | None = None,
        client_id: UUID | None = None,
    ) -> Sequence[User]:
        """필터 조건으로 사용자 목록을 조회합니다 (역할 포함, 이름순).

        List users with the role loaded, filtered by role name, active flag
        and client company.
        """
        query: Select = (
            select(User)
            .join(Role, Role.id == User.role_id)
            .options(selectinload(User.role))
            .order_by(User.full_name, User.username)
        )
        if role_name is not None:
            query = query.where(Role.name == role_name)
        if is_active is not None:
            query = query.where(User.is_active.is_(is_active))
        if client_id is not None:
            query = query.where(User.client_id == client_id)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_role_by_name(self, db: AsyncSession, name: str) -> Role | None:
        """역할 이름으로 조회 — Role by its unique name."""
        result = await db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
