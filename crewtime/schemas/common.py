"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions.
`CamelModel` is the base of every API schema: fields are declared in
snake_case, serialized in camelCase, and accepted in either form.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 별칭 베이스 모델.

    Base model with camelCase aliases. Request bodies may use
    ``workerId`` or ``worker_id``; responses are emitted as ``workerId``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === 공통 (Common) 스키마 ===

class SuccessResponse(CamelModel):
    """범용 성공 응답 스키마.

    Generic success response for lifecycle actions.

    Attributes:
        success: 성공 여부 (Always True; failures are error responses)
        message: 응답 메시지 (Human-readable confirmation, optional)
    """

    success: bool = True
    message: str | None = None


# === 알림 (Notification) 스키마 ===

class NotificationResponse(CamelModel):
    """알림 응답 스키마.

    Notification response schema.

    Attributes:
        id: 알림 UUID (Notification unique identifier)
        type: 알림 유형 (Notification type)
        message: 알림 메시지 (Human-readable message)
        reference_type: 참조 엔티티 유형 (Source entity type, nullable)
        reference_id: 참조 엔티티 UUID (Source entity UUID, nullable)
        is_read: 읽음 여부 (Read status flag)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str  # 알림 UUID 문자열 (Notification UUID as string)
    type: str  # 알림 유형 — "shift_assigned"|"timesheet_ready_for_approval"
    message: str  # 알림 메시지 (Display message)
    reference_type: str | None  # 참조 엔티티 유형 — 딥링크용 (Entity type for deep-linking)
    reference_id: str | None  # 참조 엔티티 UUID — 딥링크용 (Entity UUID for deep-linking)
    is_read: bool  # 읽음 여부 (Read flag)
    created_at: datetime  # 생성 일시 UTC (Creation timestamp)
