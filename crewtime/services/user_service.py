"""사용자 서비스 — 직원/크루 치프/고객 계정 관리 비즈니스 로직.

User Service — Creates, edits, lists and (de)activates the accounts that
appear on shifts and approve timesheets.

Rules:
    - 자기보다 낮은 레벨의 역할만 부여 (A caller may only grant roles below their own level)
    - 같은 레벨 이상의 사용자는 수정 불가 (Users at or above the caller's level are read-only to them)
    - client 역할은 고객사 필수, 그 외 역할은 고객사 없음
      (Client users belong to a client company; staff never do)
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.user import Role, RoleLevel, User
from crewtime.repositories.auth_repository import auth_repository
from crewtime.repositories.shift_repository import client_repository
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.user import UserCreate, UserResponse, UserUpdate
from crewtime.utils.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from crewtime.utils.password import hash_password

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관리 서비스.

    User management service.
    """

    def _to_response(self, user: User) -> UserResponse:
        """사용자 ORM → 응답 변환. role 로드 필요."""
        role: Role = user.role
        return UserResponse(
            id=str(user.id),
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            role_name=role.name,
            role_level=role.level,
            client_id=str(user.client_id) if user.client_id else None,
            is_active=user.is_active,
            created_at=user.created_at,
        )

    async def _grantable_role(self, db: AsyncSession, name: str, caller: User) -> Role:
        role: Role | None = await user_repository.get_role_by_name(db, name)
        if role is None:
            raise BadRequestError(f"Unknown role '{name}'")
        # 하위 직급만 부여 가능
        if role.level <= caller.role.level:
            raise ForbiddenError("Cannot grant a role at or above your own")
        return role

    async def _client_for_role(self, db: AsyncSession, role: Role, client_id: UUID | None) -> UUID | None:
        if role.level != RoleLevel.CLIENT:
            return None
        if client_id is None:
            raise BadRequestError("Client users require a clientId")
        if await client_repository.get_by_id(db, client_id) is None:
            raise NotFoundError("Client not found")
        return client_id

    async def _ensure_email_free(self, db: AsyncSession, email: str | None, user_id: UUID | None = None) -> None:
        if not email:
            return
        holders: Sequence[User] = await user_repository.get_all(db, filters={"email": email})
        if any(u.id != user_id for u in holders):
            raise ConflictError("Email already in use")

    async def _get_manageable(self, db: AsyncSession, user_id: UUID, caller: User) -> User:
        user: User | None = await user_repository.get_with_role(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role.level <= caller.role.level:
            raise ForbiddenError("Cannot modify a user at or above your own role")
        return user

    async def list_users(
        self,
        db: AsyncSession,
        role_name: str | None = None,
        is_active: bool | None = None,
        client_id: UUID | None = None,
    ) -> list[UserResponse]:
        """사용자 목록을 필터 조건으로 조회합니다.

        List users by role name, active flag and client company, ordered by
        name.
        """
        users: Sequence[User] = await user_repository.get_filtered(db, role_name, is_active, client_id)
        return [self._to_response(u) for u in users]

    async def get_user(self, db: AsyncSession, user_id: UUID, caller: User) -> UserResponse:
        """사용자 상세 — 관리자 또는 본인만.

        Raises:
            ForbiddenError: 관리자도 본인도 아님 (Neither a manager nor the user)
            NotFoundError: 사용자 없음 (User does not exist)
        """
        if not caller.is_manager and caller.id != user_id:
            raise ForbiddenError("Insufficient permissions")
        user: User | None = await user_repository.get_with_role(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return self._to_response(user)

    async def create_user(self, db: AsyncSession, data: UserCreate, caller: User) -> UserResponse:
        """새 사용자를 생성합니다.

        Create an account with a role strictly below the caller's.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 사용자 생성 데이터 (User creation data)
            caller: 요청 관리자 (Acting manager)

        Returns:
            UserResponse: 생성된 사용자 (Created user)

        Raises:
            ConflictError: 사용자명 또는 이메일 중복 (Username or email taken)
            BadRequestError: 알 수 없는 역할, 고객사 누락 (Unknown role, client user without clientId)
            ForbiddenError: 자기 레벨 이상의 역할 (Role at or above the caller's level)
            NotFoundError: 고객사 없음 (Client does not exist)
        """
        if await user_repository.exists(db, {"username": data.username}):
            raise ConflictError("Username already exists")
        await self._ensure_email_free(db, data.email)

        role: Role = await self._grantable_role(db, data.role, caller)
        client_id: UUID | None = await self._client_for_role(db, role, data.client_id)

        try:
            user: User = await user_repository.create(db, {
                "role_id": role.id,
                "client_id": client_id,
                "username": data.username,
                "full_name": data.full_name,
                "email": data.email,
                "password_hash": hash_password(data.password),
            })
        except IntegrityError:
            raise ConflictError("Username already exists")

        logger.info("Created %s user %s (%s) by %s", role.name, user.id, data.username, caller.id)
        # 역할 관계 로드를 위해 다시 조회 — Re-fetch with role loaded
        loaded: User | None = await user_repository.get_with_role(db, user.id)
        if loaded is None:
            raise NotFoundError("User not found after creation")
        return self._to_response(loaded)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: UserUpdate,
        caller: User,
    ) -> UserResponse:
        """사용자 정보를 부분 수정합니다.

        Apply the fields present in the request. Changing the role re-checks
        the client company rule against the new role.

        Raises:
            NotFoundError: 사용자 또는 고객사 없음 (User or client does not exist)
            ForbiddenError: 같은 레벨 이상 사용자 또는 역할 (Target or new role at or above the caller)
            BadRequestError: 알 수 없는 역할, 고객사 누락 (Unknown role, client user without clientId)
            ConflictError: 이메일 중복 (Email taken)
        """
        user: User = await self._get_manageable(db, user_id, caller)
        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        changes: dict[str, Any] = {}

        if fields.get("full_name") is not None:
            changes["full_name"] = fields["full_name"]
        if "email" in fields:
            await self._ensure_email_free(db, fields["email"], user.id)
            changes["email"] = fields["email"]
        if fields.get("password") is not None:
            changes["password_hash"] = hash_password(fields["password"])

        role: Role = user.role
        if fields.get("role") is not None:
            role = await self._grantable_role(db, fields["role"], caller)
            changes["role"] = role
        if "role" in changes or "client_id" in fields:
            changes["client_id"] = await self._client_for_role(
                db, role, fields.get("client_id", user.client_id)
            )

        await user_repository.update(db, user, changes)
        logger.info("Updated user %s (%s) by %s", user.id, ", ".join(sorted(changes)) or "no changes", caller.id)
        return self._to_response(user)

    async def toggle_active(self, db: AsyncSession, user_id: UUID, caller: User) -> UserResponse:
        """사용자 활성/비활성 상태를 토글합니다.

        Deactivating also revokes the user's refresh tokens; their access
        tokens stop working at the next request since inactive users are
        rejected on authentication.

        Raises:
            NotFoundError: 사용자 없음 (User does not exist)
            ForbiddenError: 같은 레벨 이상 사용자 (Target at or above the caller)
        """
        user: User = await self._get_manageable(db, user_id, caller)
        await user_repository.update(db, user, {"is_active": not user.is_active})
        if not user.is_active:
            await auth_repository.delete_user_refresh_tokens(db, user.id)
        logger.info("User %s %s by %s", user.id, "activated" if user.is_active else "deactivated", caller.id)
        return self._to_response(user)


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
