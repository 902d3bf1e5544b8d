"""알림 레포지토리 — 수신자 기준 알림 조회, 미읽음 집계, 읽음 처리.

Notification repository. Every lookup is scoped to the recipient, so a
user can neither list nor mark another user's notifications.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.notification import Notification
from crewtime.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """수신자 범위 알림 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Notification)

    def _inbox(self, user_id: UUID, unread_only: bool = False) -> Select:
        query: Select = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        return query

    async def get_inbox(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """수신함 한 페이지를 최신순으로 조회합니다.

        One page of the recipient's inbox, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 수신자 UUID (Recipient UUID)
            unread_only: 미읽음만 (Skip notifications already read)
            page: 페이지 번호 (1-based page number)
            per_page: 페이지 크기 (Page size)
        """
        query: Select = self._inbox(user_id, unread_only).order_by(Notification.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def count_unread(self, db: AsyncSession, user_id: UUID) -> int:
        """미읽음 알림 수 — Unread badge count for the recipient."""
        query: Select = select(func.count()).select_from(self._inbox(user_id, unread_only=True).subquery())
        return (await db.execute(query)).scalar() or 0

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """수신자 본인 알림을 읽음 처리하고, 대상이 있었는지 반환합니다."""
        result = await db.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .where(Notification.user_id == user_id)
            .values(is_read=True)
        )
        await db.flush()
        return result.rowcount > 0

    async def add(
        self,
        db: AsyncSession,
        user_id: UUID,
        notification_type: str,
        message: str,
        reference_type: str | None = None,
        reference_id: UUID | None = None,
    ) -> Notification:
        """알림 한 건을 추가합니다.

        Queue a notification for the recipient; flushed with the caller's
        transaction so it commits or rolls back with the triggering change.
        """
        return await self.create(db, {
            "user_id": user_id,
            "type": notification_type,
            "message": message,
            "reference_type": reference_type,
            "reference_id": reference_id,
        })


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
