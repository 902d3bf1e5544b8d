"""사용자 및 역할 관련 SQLAlchemy ORM 모델 정의.

User and Role SQLAlchemy ORM model definitions.
Roles form a level hierarchy (lower level = more authority); managers and
admins may act on any shift, crew chiefs only on shifts they lead.

Tables:
    - roles: 역할 (Roles with a level-based hierarchy)
    - users: 사용자 계정 (Employees, crew chiefs, managers and client users)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewtime.database import Base


class RoleLevel:
    """역할 레벨 상수 — Role level constants (lower = more authority)."""

    ADMIN = 1
    MANAGER = 2
    CREW_CHIEF = 3
    EMPLOYEE = 4
    CLIENT = 5


# 기본 역할 시드 — Default role seed (name, level)
DEFAULT_ROLES: tuple[tuple[str, int], ...] = (
    ("admin", RoleLevel.ADMIN),
    ("manager", RoleLevel.MANAGER),
    ("crew_chief", RoleLevel.CREW_CHIEF),
    ("employee", RoleLevel.EMPLOYEE),
    ("client", RoleLevel.CLIENT),
)


class Role(Base):
    """역할 모델 — 권한 수준을 정의.

    Role model — Defines permission levels:
        1 = admin, 2 = manager, 3 = crew_chief, 4 = employee, 5 = client

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 역할 이름 (Role name, unique)
        level: 권한 레벨 (Permission level, 1=highest, unique)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 역할 이름 — Role name ("admin", "manager", "crew_chief", "employee", "client")
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    # 권한 레벨 — Permission level (1=admin 최고 권한, 5=client)
    level: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    users = relationship("User", back_populates="role")


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — Every person the system knows: workers placed on shifts
    (employees, crew chiefs), managers, and client contacts who approve
    timesheets. Client users carry the client company they belong to.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        role_id: 역할 FK (Assigned role)
        client_id: 고객사 FK, 고객 사용자만 (Client company, client users only)
        username: 로그인 아이디 (Login username, globally unique)
        email: 이메일 (Email address, optional)
        full_name: 실명 (Full display name)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_active: 활성 상태 (Active status, soft-delete pattern)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 역할 FK — Assigned role (역할 삭제 시 제한됨, role deletion is restricted)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id"), nullable=False)
    # 고객사 FK — Client company for client users (NULL for staff)
    client_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    role = relationship("Role", back_populates="users")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_manager(self) -> bool:
        """관리자/어드민 여부 — True for manager and admin roles (level <= 2)."""
        return self.role is not None and self.role.level <= RoleLevel.MANAGER
