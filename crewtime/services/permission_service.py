"""권한 가드 서비스 — 교대 단위 작업 권한 검사 및 위임 권한 관리.

Permission guard service — Decides whether a user may act on a shift and
manages delegated crew-chief grants.

Resolution order for a shift action:
    1. 관리자/어드민 (level <= 2) → "admin"
    2. 교대 지정 크루 치프 (shifts.crew_chief_id) → "designated"
    3. 위임 권한 — shift, then job, then client scope → "shift" | "job" | "client"
    4. 그 외 → Forbidden
"""

import logging
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.models.job import Shift, ShiftStatus
from crewtime.models.permission import CrewChiefPermission, PermissionType
from crewtime.models.user import User
from crewtime.repositories.permission_repository import permission_repository
from crewtime.repositories.shift_repository import client_repository, job_repository, shift_repository
from crewtime.repositories.user_repository import user_repository
from crewtime.schemas.permission import PermissionCheckResponse, PermissionGrantRequest, PermissionResponse
from crewtime.utils.exceptions import ForbiddenError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

NO_PERMISSION: str = "none"


def ensure_shift_open(shift: Shift) -> None:
    """교대가 아직 진행 가능한지 확인합니다.

    A shift is closed once it is Pending Approval, Completed or Cancelled,
    or once a timesheet exists for it. `shift.timesheet` must be loaded.

    Raises:
        InvalidStateError: 확정/취소된 교대 (Shift no longer accepts changes)
    """
    if shift.status in ShiftStatus.CLOSED:
        raise InvalidStateError(f"Shift is closed (status: {shift.status})")
    if shift.timesheet is not None:
        raise InvalidStateError(f"Shift timesheet is already submitted (status: {shift.timesheet.status})")


class PermissionService:
    """교대 작업 권한 가드 및 위임 권한 서비스.

    Shift action guard and delegated grant management.
    """

    async def resolve_source(
        self,
        db: AsyncSession,
        user: User,
        shift: Shift,
    ) -> str:
        """사용자가 교대에 대해 갖는 권한 출처를 반환합니다.

        Return where the user's authority over the shift comes from, or
        "none". `shift.job` must be loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 역할이 로드된 사용자 (User with role loaded)
            shift: 작업이 로드된 교대 (Shift with job loaded)

        Returns:
            str: admin | designated | shift | job | client | none
        """
        if user.is_manager:
            return "admin"
        if shift.crew_chief_id is not None and shift.crew_chief_id == user.id:
            return "designated"

        scopes: tuple[tuple[str, UUID], ...] = (
            (PermissionType.SHIFT, shift.id),
            (PermissionType.JOB, shift.job_id),
            (PermissionType.CLIENT, shift.job.client_id),
        )
        for scope, target_id in scopes:
            grant = await permission_repository.get_active_grant(db, user.id, scope, target_id)
            if grant is not None:
                return scope
        return NO_PERMISSION

    async def authorize_shift_action(
        self,
        db: AsyncSession,
        user: User,
        shift: Shift,
    ) -> str:
        """교대 작업 권한을 검사합니다.

        Allow managers/admins unconditionally, otherwise require the shift's
        crew chief (designated or delegated).

        Returns:
            str: 권한 출처 (Permission source)

        Raises:
            ForbiddenError: 권한 없음 (Caller may not act on this shift)
        """
        source: str = await self.resolve_source(db, user, shift)
        if source == NO_PERMISSION:
            logger.info("Denied shift action on %s for user %s", shift.id, user.id)
            raise ForbiddenError("Crew chief permission required for this shift")
        return source

    async def get_authorized_shift(
        self,
        db: AsyncSession,
        user: User,
        shift_id: UUID,
        for_update: bool = False,
        require_open: bool = False,
    ) -> Shift:
        """교대를 조회하고 작업 권한을 검사합니다.

        Load the shift (optionally locking its row) and run the guard.
        Every mutating lifecycle operation enters through here with
        ``require_open`` set, so a finalized or cancelled shift refuses
        further assignment and clock changes.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
            ForbiddenError: 권한 없음 (Caller may not act on this shift)
            InvalidStateError: 확정/취소된 교대 (Shift is finalized or cancelled)
        """
        shift: Shift | None = await shift_repository.get_detail(db, shift_id, for_update=for_update)
        if shift is None:
            raise NotFoundError("Shift not found")
        await self.authorize_shift_action(db, user, shift)
        if require_open:
            ensure_shift_open(shift)
        return shift

    # --- 위임 권한 관리 (Delegated grants) ---

    async def _ensure_target_exists(
        self,
        db: AsyncSession,
        permission_type: str,
        target_id: UUID,
    ) -> None:
        repository = {
            PermissionType.SHIFT: shift_repository,
            PermissionType.JOB: job_repository,
            PermissionType.CLIENT: client_repository,
        }[permission_type]
        if await repository.get_by_id(db, target_id) is None:
            raise NotFoundError(f"{permission_type.capitalize()} not found")

    async def grant(
        self,
        db: AsyncSession,
        data: PermissionGrantRequest,
        granted_by: User,
    ) -> PermissionResponse:
        """위임 권한을 부여합니다.

        Grant a crew-chief permission. An identical active grant is revoked
        first so at most one active row exists per (user, scope, target).

        Raises:
            NotFoundError: 사용자 또는 대상 없음 (User or target does not exist)
        """
        if await user_repository.get_by_id(db, data.user_id) is None:
            raise NotFoundError("User not found")
        await self._ensure_target_exists(db, data.permission_type, data.target_id)

        existing = await permission_repository.get_active_grant(
            db, data.user_id, data.permission_type, data.target_id
        )
        if existing is not None:
            existing.revoked_at = datetime.now(timezone.utc)

        grant: CrewChiefPermission = await permission_repository.create(db, {
            "user_id": data.user_id,
            "permission_type": data.permission_type,
            "target_id": data.target_id,
            "granted_by": granted_by.id,
        })
        logger.info(
            "Granted %s crew chief permission on %s to %s by %s",
            data.permission_type, data.target_id, data.user_id, granted_by.id,
        )
        return self._to_response(grant)

    async def revoke(
        self,
        db: AsyncSession,
        data: PermissionGrantRequest,
        revoked_by: User,
    ) -> None:
        """위임 권한을 회수합니다.

        Raises:
            NotFoundError: 활성 권한 없음 (No matching active grant)
        """
        grant = await permission_repository.get_active_grant(
            db, data.user_id, data.permission_type, data.target_id
        )
        if grant is None:
            raise NotFoundError("Permission not found")
        grant.revoked_at = datetime.now(timezone.utc)
        await db.flush()
        logger.info(
            "Revoked %s crew chief permission on %s from %s by %s",
            data.permission_type, data.target_id, data.user_id, revoked_by.id,
        )

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[PermissionResponse]:
        """사용자의 활성 위임 권한 목록 — Active grants of a user."""
        grants: Sequence[CrewChiefPermission] = await permission_repository.get_active_for_user(db, user_id)
        return [self._to_response(g) for g in grants]

    async def check(
        self,
        db: AsyncSession,
        user: User,
        shift_id: UUID,
    ) -> PermissionCheckResponse:
        """호출자의 교대 권한을 보고합니다 — Report the caller's authority over a shift.

        Raises:
            NotFoundError: 교대 없음 (Shift does not exist)
        """
        shift: Shift | None = await shift_repository.get_detail(db, shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        source: str = await self.resolve_source(db, user, shift)
        return PermissionCheckResponse(
            has_permission=source != NO_PERMISSION,
            permission_source=source,
        )

    def _to_response(self, grant: CrewChiefPermission) -> PermissionResponse:
        return PermissionResponse(
            id=str(grant.id),
            user_id=str(grant.user_id),
            permission_type=grant.permission_type,
            target_id=str(grant.target_id),
            granted_by=str(grant.granted_by) if grant.granted_by else None,
            granted_at=grant.granted_at,
            revoked_at=grant.revoked_at,
        )


# 싱글턴 인스턴스 — Singleton instance
permission_service: PermissionService = PermissionService()
