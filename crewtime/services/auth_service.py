"""인증 서비스 — 로그인, 토큰 갱신, 로그아웃 비즈니스 로직.

Auth Service — Business logic for login, token refresh, logout and the
current-user profile.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.config import settings
from crewtime.models.user import User
from crewtime.repositories.auth_repository import auth_repository
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserMeResponse
from crewtime.utils.exceptions import UnauthorizedError
from crewtime.utils.jwt import create_access_token, create_refresh_token, decode_token
from crewtime.utils.password import verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def _build_jwt_payload(self, user: User) -> dict[str, str | int]:
        return {
            "sub": str(user.id),
            "role": user.role.name,
            "level": user.role.level,
        }

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh token pair and persist the refresh token.
        Older refresh tokens of the user are dropped, so one session is
        active per user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 역할이 로드된 사용자 (User with role loaded)

        Returns:
            TokenResponse: 토큰 응답 (Token response with access and refresh tokens)
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 기존 리프레시 토큰 정리 — Clean up old refresh tokens to prevent accumulation
        await auth_repository.delete_user_refresh_tokens(db, user.id)

        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.create_refresh_token(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """로그인을 처리합니다.

        Verify credentials and issue a token pair.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or deactivated account)
        """
        user: User | None = await auth_repository.get_user_by_username(db, data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for username=%s", data.username)
            raise UnauthorizedError("Invalid username or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        logger.info("User %s logged in", user.id)
        return await self._generate_tokens(db, user)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Issue a new token pair using a stored, unexpired refresh token.

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        expires_at: datetime = db_token.expires_at
        # SQLite는 tz 정보를 보존하지 않음 — SQLite drops tzinfo
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        if payload.get("type") != "refresh" or payload.get("sub") is None:
            raise UnauthorizedError("Invalid refresh token payload")

        user: User | None = await user_repository.get_with_role(db, UUID(payload["sub"]))
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user)

    async def logout(
        self,
        db: AsyncSession,
        refresh_token: str,
    ) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제합니다 (Revoke the refresh token)."""
        await auth_repository.delete_refresh_token(db, refresh_token)

    def get_me(self, user: User) -> UserMeResponse:
        """현재 로그인한 사용자 프로필을 반환합니다.

        Return the profile of the authenticated user (role already loaded).
        """
        return UserMeResponse(
            id=str(user.id),
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            role_name=user.role.name,
            role_level=user.role.level,
            client_id=str(user.client_id) if user.client_id else None,
            is_active=user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
