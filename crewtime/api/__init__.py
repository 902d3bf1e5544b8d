"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router
mounted at ``/api/v1`` by the FastAPI application.

Included routers:
    - auth: 인증 (Login, token refresh, logout, profile)
    - users: 사용자 계정 관리 (Account management)
    - clients / jobs: 고객사/작업 관리 (Client and job management)
    - shifts: 교대 CRUD 및 배정/출퇴근/확정 (Shift CRUD and lifecycle actions)
    - timesheets: 타임시트 조회/승인/내보내기 (Timesheet detail, approval, export)
    - crew_chief_permissions: 크루 치프 위임 권한 (Delegated crew-chief grants)
    - notifications: 알림 (Notifications)
"""

from fastapi import APIRouter

from crewtime.api.auth import router as auth_router
from crewtime.api.clients import jobs_router
from crewtime.api.clients import router as clients_router
from crewtime.api.crew_chief_permissions import router as permissions_router
from crewtime.api.notifications import router as notifications_router
from crewtime.api.shifts import router as shifts_router
from crewtime.api.timesheets import router as timesheets_router
from crewtime.api.users import router as users_router

api_router: APIRouter = APIRouter()

# 인증 — Authentication
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])

# 상위 엔티티 — Clients and jobs
api_router.include_router(clients_router, prefix="/clients", tags=["Clients"])
api_router.include_router(jobs_router, prefix="/jobs", tags=["Jobs"])

# 교대 수명 주기 — Shift lifecycle
api_router.include_router(shifts_router, prefix="/shifts", tags=["Shifts"])
api_router.include_router(timesheets_router, prefix="/timesheets", tags=["Timesheets"])
api_router.include_router(permissions_router, prefix="/crew-chief-permissions", tags=["Crew Chief Permissions"])

# 커뮤니케이션 — Communication
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
