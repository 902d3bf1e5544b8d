"""크루 치프 위임 권한 라우터 — 부여, 회수, 조회, 확인.

Crew Chief Permissions Router — Grant and revoke delegated crew-chief
authority scoped to a shift, job or client, and report the caller's
authority over a shift.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import get_current_user, require_manager
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.common import SuccessResponse
from crewtime.schemas.permission import (
    PermissionCheckResponse,
    PermissionGrantRequest,
    PermissionResponse,
)
from crewtime.services.permission_service import permission_service
from crewtime.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


@router.post("", response_model=PermissionResponse, status_code=201)
async def grant_permission(
    data: PermissionGrantRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> PermissionResponse:
    """위임 권한 부여 (동일한 활성 권한은 먼저 회수). Manager 이상."""
    result: PermissionResponse = await permission_service.grant(db, data, current_user)
    await db.commit()
    return result


@router.delete("", response_model=SuccessResponse)
async def revoke_permission(
    data: PermissionGrantRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> SuccessResponse:
    """위임 권한 회수 — 부여 시와 같은 본문. Manager 이상."""
    await permission_service.revoke(db, data, current_user)
    await db.commit()
    return SuccessResponse(message="Permission revoked")


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
) -> list[PermissionResponse]:
    """활성 위임 권한 목록.

    List active grants. Without ``userId`` the caller's own grants are
    returned; other users' grants are visible to managers only.
    """
    target: UUID = user_id or current_user.id
    if target != current_user.id and not current_user.is_manager:
        raise ForbiddenError("Insufficient permissions")
    return await permission_service.list_for_user(db, target)


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    shift_id: Annotated[UUID, Query(alias="shiftId")],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PermissionCheckResponse:
    """호출자의 교대 권한 확인 — hasPermission, permissionSource."""
    return await permission_service.check(db, current_user, shift_id)
