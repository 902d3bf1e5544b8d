"""사용자 관리 라우터 — 직원/크루 치프/고객 계정 CRUD.

Users Router — Account management. Listing, creation, edits and
activation are manager-only; a user may also read their own record.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import get_current_user, require_manager
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.user import UserCreate, UserResponse, UserUpdate
from crewtime.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    role: Annotated[str | None, Query(description="역할 이름 필터")] = None,
    is_active: Annotated[bool | None, Query(alias="isActive", description="활성 상태 필터")] = None,
    client_id: Annotated[UUID | None, Query(alias="clientId", description="고객사 필터")] = None,
) -> list[UserResponse]:
    """사용자 목록을 필터 조건으로 조회합니다.

    List users with optional filters (role, isActive, clientId).
    """
    return await user_service.list_users(db, role_name=role, is_active=is_active, client_id=client_id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """사용자 상세 조회 — 관리자 또는 본인."""
    return await user_service.get_user(db, user_id, current_user)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> UserResponse:
    """새 사용자를 생성합니다.

    Create a user with a role below the caller's own.
    """
    result: UserResponse = await user_service.create_user(db, data, current_user)
    await db.commit()
    return result


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> UserResponse:
    """사용자 정보를 수정합니다 (부분 수정).

    Update an existing user's information; omitted fields are untouched.
    """
    result: UserResponse = await user_service.update_user(db, user_id, data, current_user)
    await db.commit()
    return result


@router.patch("/{user_id}/active", response_model=UserResponse)
async def toggle_user_active(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> UserResponse:
    """사용자 활성/비활성 상태를 토글합니다.

    Toggle a user's active/inactive status.
    """
    result: UserResponse = await user_service.toggle_active(db, user_id, current_user)
    await db.commit()
    return result
