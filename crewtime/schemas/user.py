"""사용자 관리 Pydantic 요청/응답 스키마 정의.

User management request/response schemas. Roles are addressed by name
("manager", "crew_chief", "employee", "client", ...).
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from crewtime.schemas.common import CamelModel


class UserCreate(CamelModel):
    """사용자 생성 요청 스키마.

    Attributes:
        username: 로그인 아이디, 전역 고유 (Login username, globally unique)
        password: 초기 비밀번호, 8자 이상 (Initial password, at least 8 characters)
        full_name: 실명 (Full display name)
        email: 이메일 (Email, optional)
        role: 역할 이름 (Role name)
        client_id: 고객사 UUID, client 역할에 필수 (Client company, required for the client role)
    """

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    role: str
    client_id: UUID | None = None


class UserUpdate(CamelModel):
    """사용자 수정 요청 스키마 — Partial update; omitted fields are untouched."""

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: str | None = None
    client_id: UUID | None = None


class UserResponse(CamelModel):
    """사용자 응답 스키마.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        username: 로그인 아이디 (Login username)
        full_name: 실명 (Full display name)
        email: 이메일 (Email, nullable)
        role_name: 역할 이름 (Role name)
        role_level: 역할 레벨 (1=admin … 5=client)
        client_id: 고객사 UUID (Client company, client users only)
        is_active: 활성 상태 (Account active status)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str
    username: str
    full_name: str
    email: str | None
    role_name: str
    role_level: int
    client_id: str | None
    is_active: bool
    created_at: datetime
