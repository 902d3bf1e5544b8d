"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite database, session, and httpx client
fixtures. Every test gets a fresh database (aiosqlite + StaticPool, foreign
keys on) whose schema is created from ORM metadata, installed on
``app.state.database`` the same way the lifespan does in production.

Fixture data is committed through a setup session; tests that inspect the
database after a request read through a fresh session (see ``fetch_one``
and ``fetch_all``) so they never see a stale identity map.
"""

import datetime as dt
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from crewtime.database import Database
from crewtime.main import app
from crewtime.models import *  # noqa: F401,F403 — register all models with metadata
from crewtime.models.job import Client, Job, Shift, ShiftStatus
from crewtime.models.user import DEFAULT_ROLES, Role, User
from crewtime.utils.jwt import create_access_token
from crewtime.utils.password import hash_password

API = "/api/v1"
TEST_PASSWORD = "crewtime123!"


# ---------------------------------------------------------------------------
# Function-scoped: DB 핸들, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """테스트마다 새 인메모리 DB를 생성하고 앱에 연결합니다."""
    database = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.create_all()
    app.state.database = database
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """픽스처 데이터 생성용 세션 — Setup session; fixtures commit through it."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 500 응답도 응답으로 받습니다."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def fetch_one(database: Database, query: Select) -> Any:
    """새 세션으로 단일 결과 조회 — Read one row through a fresh session."""
    async with database.session() as session:
        return (await session.execute(query)).scalar_one_or_none()


async def fetch_all(database: Database, query: Select) -> list[Any]:
    """새 세션으로 결과 목록 조회 — Read rows through a fresh session."""
    async with database.session() as session:
        return list((await session.execute(query)).scalars().all())


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def roles(db: AsyncSession) -> dict[str, Role]:
    """기본 5개 역할을 생성합니다."""
    result: dict[str, Role] = {}
    for name, level in DEFAULT_ROLES:
        role = Role(name=name, level=level)
        db.add(role)
        result[name] = role
    await db.commit()
    return result


async def make_user(
    db: AsyncSession,
    role: Role,
    username: str,
    full_name: str,
    client_id: Any = None,
    is_active: bool = True,
) -> User:
    user = User(
        role_id=role.id,
        username=username,
        full_name=full_name,
        email=f"{username}@test.com",
        password_hash=hash_password(TEST_PASSWORD),
        client_id=client_id,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, roles) -> User:
    return await make_user(db, roles["admin"], "admin", "Test Admin")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession, roles) -> User:
    return await make_user(db, roles["manager"], "manager", "Test Manager")


@pytest_asyncio.fixture
async def chief_user(db: AsyncSession, roles) -> User:
    """교대에 지정된 크루 치프."""
    return await make_user(db, roles["crew_chief"], "chief", "Casey Chief")


@pytest_asyncio.fixture
async def other_chief(db: AsyncSession, roles) -> User:
    """교대와 무관한 크루 치프 — A crew chief not designated on the shift."""
    return await make_user(db, roles["crew_chief"], "otherchief", "Oren Other")


@pytest_asyncio.fixture
async def employee_1(db: AsyncSession, roles) -> User:
    return await make_user(db, roles["employee"], "worker1", "Wren Worker")


@pytest_asyncio.fixture
async def employee_2(db: AsyncSession, roles) -> User:
    return await make_user(db, roles["employee"], "worker2", "Wade Worker")


@pytest_asyncio.fixture
async def employee_3(db: AsyncSession, roles) -> User:
    return await make_user(db, roles["employee"], "worker3", "Willa Worker")


@pytest_asyncio.fixture
async def acme(db: AsyncSession) -> Client:
    """테스트 고객사를 생성합니다."""
    c = Client(company_name="Acme Events", contact_name="Ada Acme", contact_email="ada@acme.test")
    db.add(c)
    await db.commit()
    return c


@pytest_asyncio.fixture
async def client_user(db: AsyncSession, roles, acme) -> User:
    """고객사 소속 사용자 — A user of the client company owning the job."""
    return await make_user(db, roles["client"], "acmeuser", "Ada Acme", client_id=acme.id)


@pytest_asyncio.fixture
async def job(db: AsyncSession, acme) -> Job:
    j = Job(client_id=acme.id, name="Arena Load-In", po_number="PO-1001")
    db.add(j)
    await db.commit()
    return j


@pytest_asyncio.fixture
async def shift(db: AsyncSession, job, chief_user) -> Shift:
    """크루 치프가 지정된 Upcoming 교대를 생성합니다."""
    s = Shift(
        job_id=job.id,
        date=dt.date(2026, 3, 14),
        start_time=dt.time(8, 0),
        end_time=dt.time(16, 0),
        location="Main Arena",
        crew_chief_id=chief_user.id,
        requested_workers=3,
        status=ShiftStatus.UPCOMING,
    )
    db.add(s)
    await db.commit()
    return s


def make_token(user: User, role_name: str, role_level: int) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "role": role_name,
        "level": role_level,
    })


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user, "admin", 1)


@pytest.fixture
def manager_token(manager_user) -> str:
    return make_token(manager_user, "manager", 2)


@pytest.fixture
def chief_token(chief_user) -> str:
    return make_token(chief_user, "crew_chief", 3)


@pytest.fixture
def other_chief_token(other_chief) -> str:
    return make_token(other_chief, "crew_chief", 3)


@pytest.fixture
def employee_token(employee_1) -> str:
    return make_token(employee_1, "employee", 4)


@pytest.fixture
def client_token(client_user) -> str:
    return make_token(client_user, "client", 5)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def assign_worker(
    client: AsyncClient,
    shift_id: Any,
    employee_id: Any,
    token: str,
    role_code: str = "SH",
) -> str:
    """배정 API 호출 후 배정 ID 반환 — Assign through the API, return the assignment id."""
    res = await client.post(f"{API}/shifts/{shift_id}/assign", json={
        "employeeId": str(employee_id) if employee_id else None,
        "roleCode": role_code,
    }, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()["id"]


async def shift_action(
    client: AsyncClient,
    shift_id: Any,
    action: str,
    token: str,
    worker_id: str | None = None,
):
    """교대 수명 주기 동작 호출 — POST /shifts/{id}/{action} with an optional workerId."""
    body = {"workerId": worker_id} if worker_id is not None else None
    return await client.post(
        f"{API}/shifts/{shift_id}/{action}", json=body, headers=auth_header(token)
    )
