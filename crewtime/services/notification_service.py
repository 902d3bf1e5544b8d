"""알림 서비스 — 알림 비즈니스 로직.

Notification Service — Listing, read marking, and auto-creation for shift
assignments and timesheets awaiting manager approval.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.job import Shift
from crewtime.models.notification import Notification
from crewtime.models.timesheet import Timesheet
from crewtime.repositories.notification_repository import notification_repository
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.common import NotificationResponse
from crewtime.utils.exceptions import NotFoundError
from crewtime.utils.pagination import NotificationPage


class NotificationService:
    """알림 서비스.

    Notification service providing read operations and auto-creation.
    """

    # --- 공통 조회/읽음 처리 (Shared read operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> NotificationPage:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다.

        List paginated notifications for a user. The envelope also carries
        the unread count across the whole inbox, independent of the filter.
        """
        items, total = await notification_repository.get_inbox(db, user_id, unread_only, page, per_page)
        result = NotificationPage.build([self._to_response(n) for n in items], total, page, per_page)
        result.unread_count = await notification_repository.count_unread(db, user_id)
        return result

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> None:
        """단일 알림을 읽음 처리합니다.

        Raises:
            NotFoundError: 알림이 없거나 본인 알림이 아님 (Missing or not the caller's)
        """
        if not await notification_repository.mark_read(db, notification_id, user_id):
            raise NotFoundError("Notification not found")

    # --- 자동 생성 (Auto-creation) ---

    async def create_for_assignment(
        self,
        db: AsyncSession,
        employee_id: UUID,
        shift: Shift,
    ) -> Notification:
        """교대 배정 시 작업자 알림을 생성합니다.

        Notify an employee that they were placed on a shift.
        """
        message: str = (
            f"You have been assigned to a shift on {shift.date.isoformat()} "
            f"at {shift.start_time.strftime('%H:%M')}"
        )
        return await notification_repository.add(
            db,
            user_id=employee_id,
            notification_type="shift_assigned",
            message=message,
            reference_type="shift",
            reference_id=shift.id,
        )

    async def create_for_manager_approval(
        self,
        db: AsyncSession,
        timesheet: Timesheet,
        shift: Shift,
    ) -> list[Notification]:
        """고객 승인 후 관리자들에게 최종 승인 요청 알림을 생성합니다.

        Notify every active manager/admin that a client-approved timesheet
        awaits final approval.
        """
        message: str = f"Timesheet for the {shift.date.isoformat()} shift is ready for final approval"
        notifications: list[Notification] = []
        for manager in await user_repository.get_active_managers(db):
            notifications.append(
                await notification_repository.add(
                    db,
                    user_id=manager.id,
                    notification_type="timesheet_ready_for_approval",
                    message=message,
                    reference_type="timesheet",
                    reference_id=timesheet.id,
                )
            )
        return notifications

    def _to_response(self, notification: Notification) -> NotificationResponse:
        return NotificationResponse(
            id=str(notification.id),
            type=notification.type,
            message=notification.message,
            reference_type=notification.reference_type,
            reference_id=str(notification.reference_id) if notification.reference_id else None,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
