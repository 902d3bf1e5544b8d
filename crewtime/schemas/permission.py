"""크루 치프 위임 권한 Pydantic 스키마 정의.

Crew-chief permission Pydantic request/response schema definitions.
"""

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from crewtime.models.permission import PermissionType
from crewtime.schemas.common import CamelModel


class PermissionGrantRequest(CamelModel):
    """권한 부여/회수 요청 스키마.

    Attributes:
        user_id: 대상 사용자 UUID (Grantee)
        permission_type: 범위 (shift | job | client)
        target_id: 대상 ID (Shift, job or client id)
    """

    user_id: UUID
    permission_type: str
    target_id: UUID

    @field_validator("permission_type")
    @classmethod
    def _known_scope(cls, value: str) -> str:
        if value not in PermissionType.ALL:
            raise ValueError("permissionType must be one of shift, job, client")
        return value


class PermissionResponse(CamelModel):
    """위임 권한 응답 스키마 — An active grant."""

    id: str
    user_id: str
    permission_type: str
    target_id: str
    granted_by: str | None
    granted_at: datetime
    revoked_at: datetime | None


class PermissionCheckResponse(CamelModel):
    """권한 확인 응답 스키마.

    Attributes:
        has_permission: 권한 보유 여부 (Whether the caller may act on the shift)
        permission_source: 권한 출처 (admin | designated | shift | job | client | none)
    """

    has_permission: bool
    permission_source: str
