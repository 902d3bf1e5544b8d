"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 역할 및 사용자 (Role and User)
    token: 리프레시 토큰 (Refresh tokens)
    job: 고객사, 작업, 교대, 역할별 필요 인원 (Client, Job, Shift, WorkerRequirement)
    assignment: 교대 배정 및 출퇴근 기록 (Assignment and TimeEntry)
    timesheet: 타임시트 승인 (Timesheet approval envelope)
    permission: 크루 치프 위임 권한 (Delegated crew-chief grants)
    shift_log: 교대 감사 로그 (Shift audit trail)
    notification: 알림 (User notifications)
"""

from crewtime.models.user import Role, User
from crewtime.models.token import RefreshToken
from crewtime.models.job import Client, Job, Shift, WorkerRequirement
from crewtime.models.assignment import Assignment, TimeEntry
from crewtime.models.timesheet import Timesheet
from crewtime.models.permission import CrewChiefPermission
from crewtime.models.shift_log import ShiftLog
from crewtime.models.notification import Notification

__all__ = [
    "Role", "User",
    "RefreshToken",
    "Client", "Job", "Shift", "WorkerRequirement",
    "Assignment", "TimeEntry",
    "Timesheet",
    "CrewChiefPermission",
    "ShiftLog",
    "Notification",
]
