"""데이터베이스 핸들 및 세션 설정 모듈.

Database handle and session configuration module.
`Database` owns one async SQLAlchemy engine and session factory. It is built
once in the application lifespan, kept on ``app.state.database``, and
disposed on shutdown. Request handlers receive a per-request session via
the `get_db` dependency.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    All models inherit from this class to register with the metadata.
    """

    pass


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite는 기본적으로 FK(ON DELETE CASCADE)를 무시함 — SQLite ignores FKs unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """비동기 데이터베이스 핸들 — 엔진과 세션 팩토리의 수명 주기 관리.

    Async database handle owning the engine and session factory.
    Constructed explicitly at process start and disposed at shutdown;
    there is no module-level engine.

    Attributes:
        url: 연결 문자열 (Connection URL)
        engine: 비동기 엔진 (Async engine)
        sessionmaker: 세션 팩토리 (Session factory, expire_on_commit=False)
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any) -> None:
        """엔진과 세션 팩토리를 생성합니다.

        Create the engine and session factory.

        Args:
            url: SQLAlchemy 비동기 URL (Async SQLAlchemy URL)
            echo: SQL 로그 출력 여부 (Echo SQL statements)
            **engine_kwargs: create_async_engine 추가 인자 (Extra engine options, e.g. poolclass)
        """
        self.url: str = url

        if url.startswith("postgresql+asyncpg"):
            # pool_pre_ping=True: 커넥션 풀에서 꺼낸 연결의 유효성을 사전 확인 (Validates connections before use)
            engine_kwargs.setdefault("pool_pre_ping", True)
            engine_kwargs.setdefault("pool_size", 5)
            engine_kwargs.setdefault("max_overflow", 10)
            # 트랜잭션 모드 풀러에서 prepared statement 비활성화
            # Disable prepared statement caches for transaction-mode pooling
            engine_kwargs.setdefault("connect_args", {"statement_cache_size": 0})

        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **engine_kwargs)

        if url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit without refresh)
        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """새 세션을 반환합니다 — Open a new session (use as async context manager)."""
        return self.sessionmaker()

    async def create_all(self) -> None:
        """ORM 메타데이터로 스키마를 생성합니다 (개발/테스트용).

        Create all tables from ORM metadata. Used for local development and
        tests; production schemas are managed by Alembic.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """커넥션 풀을 닫습니다 — Close every pooled connection."""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 비동기 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields one async session per request from the
    application's `Database` handle. If the handler raises, pending changes
    are rolled back before the session is closed, so a failed request never
    leaves a partial write behind.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
