"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current user from JWT
and enforcing role-based access control on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출, 없으면 401 (HTTPBearer extracts the token; missing → 401)
    3. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    4. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    5. 사용자 활성 상태를 확인 (User active status is verified)

Shift-level authorization (crew chief of the shift, delegated grants) is
not a dependency: it needs the shift row and runs inside the services via
``permission_service.get_authorized_shift``.
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.database import get_db
from crewtime.models.user import RoleLevel, User
from crewtime.repositories.user_repository import user_repository
from crewtime.utils.exceptions import ForbiddenError, UnauthorizedError
from crewtime.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — auto_error=False: 헤더 누락도 401로 응답
# (Missing Authorization header is answered with 401, not 403)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.
    Validates token signature, expiration, type, and user existence/active status.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials, None if absent)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        User: 인증된 사용자 ORM 인스턴스, role 로드됨 (Authenticated user with role loaded)

    Raises:
        UnauthorizedError: 토큰 없음/무효/만료, 사용자 없음/비활성
                           (Missing, invalid or expired token; unknown or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")

    try:
        payload: dict = decode_token(credentials.credentials)
        # 토큰 타입 검증 — Reject refresh tokens used as access tokens
        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type")
        user_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid or expired token")

    user: User | None = await user_repository.get_with_role(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return user


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing a maximum role level. Lower level = higher authority.

    Level hierarchy:
        1 = admin, 2 = manager, 3 = crew_chief, 4 = employee, 5 = client

    Args:
        max_level: 허용되는 최대 역할 레벨 (Maximum allowed role level, inclusive)

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (FastAPI dependency returning the User or raising 403)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        role = current_user.role
        if role is None or role.level > max_level:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured level dependency
require_manager = require_level(RoleLevel.MANAGER)  # Admin + Manager (level <= 2)
