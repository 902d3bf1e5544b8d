"""고객사/작업 라우터 — 교대의 상위 엔티티 관리. Manager 이상.

Clients and Jobs Routers — Supporting CRUD for the entities above shifts.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.api.deps import require_manager
from crewtime.database import get_db
from crewtime.models.user import User
from crewtime.schemas.shift import ClientCreate, ClientResponse, JobCreate, JobResponse
from crewtime.services.shift_service import shift_service

router: APIRouter = APIRouter()
jobs_router: APIRouter = APIRouter()


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[ClientResponse]:
    """고객사 목록 — List client companies."""
    return await shift_service.list_clients(db)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> ClientResponse:
    """고객사 생성 — Create a client company."""
    result: ClientResponse = await shift_service.create_client(db, data)
    await db.commit()
    return result


@jobs_router.get("", response_model=list[JobResponse])
async def list_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    client_id: Annotated[UUID | None, Query(alias="clientId")] = None,
) -> list[JobResponse]:
    """작업 목록 (고객사 필터) — List jobs, optionally for one client."""
    return await shift_service.list_jobs(db, client_id=client_id)


@jobs_router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    data: JobCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> JobResponse:
    """작업 생성 — Create a job under a client."""
    result: JobResponse = await shift_service.create_job(db, data)
    await db.commit()
    return result
