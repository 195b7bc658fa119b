"""
Generic CRUD Access
===================

Table-level create/read/update/delete helpers shared by the subscription
store and the seed script.

Filters are keyword arguments naming mapped attributes and are combined with
``AND``; a ``None`` value matches ``IS NULL``.
"""

from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import delete, func, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class CRUDRepository(Generic[ModelT]):
    """CRUD operations for a single mapped table."""

    def __init__(self, db: AsyncSession, model: type[ModelT]):
        self.db = db
        self.model = model

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def _column(self, name: str):
        columns = inspect(self.model).columns
        if name not in columns:
            raise ValueError(
                f"Unknown column '{name}' for table '{self.model.__tablename__}'"
            )
        return getattr(self.model, name)

    def _conditions(self, filters: dict[str, Any]) -> list:
        conditions = []
        for name, value in filters.items():
            column = self._column(name)
            conditions.append(column.is_(None) if value is None else column == value)
        return conditions

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, id: Any) -> Optional[ModelT]:
        """Fetch a row by primary key."""
        return await self.db.get(self.model, id)

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        """Return the first row matching ``filters`` or None."""
        stmt = select(self.model).where(*self._conditions(filters)).limit(1)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def find_all(
        self,
        *,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> Sequence[ModelT]:
        """Return all rows matching ``filters``."""
        stmt = select(self.model).where(*self._conditions(filters))
        if order_by is not None:
            stmt = stmt.order_by(self._column(order_by))
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def exists(self, **filters: Any) -> bool:
        """Check whether any row matches ``filters``."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(*self._conditions(filters))
        )
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def insert(self, values: dict[str, Any]) -> ModelT:
        """Insert one row and return it with server defaults loaded."""
        for name in values:
            self._column(name)
        instance = self.model(**values)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def insert_many(self, rows: list[dict[str, Any]]) -> list[ModelT]:
        """Insert several rows in one flush."""
        instances = []
        for values in rows:
            for name in values:
                self._column(name)
            instances.append(self.model(**values))
        self.db.add_all(instances)
        await self.db.flush()
        return instances

    async def update_where(self, values: dict[str, Any], **filters: Any) -> int:
        """Update rows matching ``filters``; returns the affected row count."""
        if not filters:
            raise ValueError("update_where requires at least one filter")
        for name in values:
            self._column(name)
        stmt = (
            update(self.model)
            .where(*self._conditions(filters))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_where(self, **filters: Any) -> int:
        """Delete rows matching ``filters``; returns the affected row count."""
        if not filters:
            raise ValueError("delete_where requires at least one filter, use delete_all")
        stmt = delete(self.model).where(*self._conditions(filters))
        result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_all(self) -> int:
        """Delete every row in the table."""
        result = await self.db.execute(delete(self.model))
        return result.rowcount
