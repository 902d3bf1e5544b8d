"""알림 라우터 — 내 알림 목록 및 읽음 처리.

Notifications Router — The caller's notifications and mark-as-read.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import get_current_user
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.common import SuccessResponse
from crewtime.services.notification_service import notification_service
from crewtime.utils.pagination import NotificationPage

router: APIRouter = APIRouter()


@router.get("", response_model=NotificationPage)
async def list_my_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    unread_only: Annotated[bool, Query(alias="unreadOnly")] = False,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(alias="perPage", ge=1, le=100)] = 20,
) -> NotificationPage:
    """내 알림 목록 (최신순) 및 미읽음 수 — The caller's notifications, newest first, with the unread count."""
    return await notification_service.list_notifications(
        db, user_id=current_user.id, unread_only=unread_only, page=page, per_page=per_page
    )


@router.patch("/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    """알림 읽음 처리 — Mark one of the caller's notifications read."""
    await notification_service.mark_read(db, notification_id, current_user.id)
    await db.commit()
    return SuccessResponse()
