"""공통 레포지토리 — 도메인 레포지토리가 상속하는 제네릭 CRUD.

Shared repository base. Domain repositories subclass it with their model
and add the lookups their services need; row locking for read-then-write
flows goes through ``for_update``.
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crewtime.database import Base
from crewtime.utils.pagination import paginate

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델 하나에 대한 제네릭 CRUD.

    Attributes:
        model: 대상 ORM 모델 (Mapped model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        for_update: bool = False,
    ) -> ModelType | None:
        """기본 키로 조회합니다.

        Fetch one row by primary key.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 기본 키 (Primary key)
            for_update: 트랜잭션 종료까지 행 잠금, SQLite에서는 무시
                        (Hold a row lock until commit; no-op on SQLite)
        """
        query: Select = select(self.model).where(self.model.id == record_id)
        if for_update:
            query = query.with_for_update()
        return (await db.execute(query)).scalar_one_or_none()

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """등호 필터로 전체 조회 — Equality filters; None values are ignored."""
        query: Select = select(self.model)
        for column_name, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, column_name) == value)
        if order_by is not None:
            query = query.order_by(order_by)
        return (await db.execute(query)).scalars().all()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        return await paginate(db, query, page, per_page)

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """행을 추가하고 flush합니다.

        Insert a row and flush, so server-side defaults and constraint
        violations surface here as ``IntegrityError``.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        update_data: dict[str, Any],
    ) -> ModelType:
        """로드된 행에 값을 적용하고 flush합니다 — Apply values to a loaded row and flush."""
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        await db.flush()
        return db_obj

    async def delete(self, db: AsyncSession, db_obj: ModelType) -> None:
        await db.delete(db_obj)
        await db.flush()

    async def exists(self, db: AsyncSession, filters: dict[str, Any]) -> bool:
        """등호 조건에 맞는 행 존재 여부 — Whether any row matches every equality filter."""
        query: Select = select(func.count()).select_from(self.model)
        for column_name, value in filters.items():
            query = query.where(getattr(self.model, column_name) == value)
        return ((await db.execute(query)).scalar() or 0) > 0
