"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login, token issuance/refresh, and current user info.
"""

from crewtime.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """로그인 요청 스키마.

    Attributes:
        username: 사용자 로그인 아이디 (User login identifier)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    username: str  # 사용자 로그인 아이디 (User login identifier)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class TokenResponse(CamelModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful login or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 30분 기본 (Access token, default TTL: 30min)
    refresh_token: str  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"


class RefreshRequest(CamelModel):
    """토큰 갱신/로그아웃 요청 스키마.

    Token refresh and logout request schema.

    Attributes:
        refresh_token: 기존 리프레시 토큰 (Existing refresh token to exchange or revoke)
    """

    refresh_token: str


class UserMeResponse(CamelModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Current user info response schema for the /me endpoint.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        username: 로그인 아이디 (Login username)
        full_name: 실명 (Full display name)
        email: 이메일 (Email, nullable)
        role_name: 역할 이름 (Role name, e.g. "crew_chief")
        role_level: 역할 레벨 (1=admin … 5=client)
        client_id: 고객사 UUID, 고객 사용자만 (Client company, client users only)
        is_active: 활성 상태 (Account active status)
    """

    id: str
    username: str
    full_name: str
    email: str | None
    role_name: str
    role_level: int  # 역할 레벨 — 낮을수록 높은 권한 (Lower = more authority)
    client_id: str | None = None
    is_active: bool
