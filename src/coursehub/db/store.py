"""Storage interface used by the services.

Learn: Services never talk to the driver directly. They go through this
small document-style API (get/put by id, bulk delete by criteria,
scan a collection, and an atomic insert-if-absent), so the rules about
what counts as a storage fault live in one place:

- A constraint violation during insert_unique() is an expected outcome
  (returns False), never an exception.
- Every other SQLAlchemy error is a StorageUnavailable. Nothing here
  retries; retry policy belongs to the caller.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, TypeVar

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.errors import StorageUnavailable

logger = structlog.get_logger()

T = TypeVar("T")


class Store:
    """Storage operations over one request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def get(self, model: type[T], id: Any, for_update: bool = False) -> Optional[T]:
        """Load one row by primary key, always fresh from the database.

        Learn: populate_existing refreshes objects already in the identity
        map, so a second get() after an enrollment sees the new roster.
        for_update takes a row lock on PostgreSQL (ignored by SQLite).
        """
        query = (
            select(model)
            .where(model.id == id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise self._unavailable("get", e)
        return result.scalars().first()

    async def scan(self, model: type[T], *criteria, order_by=None) -> list[T]:
        query = select(model).where(*criteria).execution_options(populate_existing=True)
        if order_by is not None:
            query = query.order_by(order_by)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise self._unavailable("scan", e)
        return list(result.scalars().all())

    # ─── Writes ─────────────────────────────────────────

    async def put(self, obj: T) -> T:
        """Add (or re-add) an object and flush it so defaults are populated."""
        self.db.add(obj)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            raise self._unavailable("put", e)
        return obj

    async def insert_unique(self, obj: Any) -> bool:
        """Insert a row unless a constraint says it already exists.

        Returns True when inserted. Returns False when a unique or foreign
        key constraint rejected the row; the unit of work is rolled back
        in that case, so callers must reload anything they still need.
        """
        self.db.add(obj)
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.info(
                "store.insert_conflict",
                table=obj.__tablename__,
                error=str(e.orig),
            )
            await self.rollback()
            return False
        except SQLAlchemyError as e:
            raise self._unavailable("insert_unique", e)
        return True

    async def delete_where(self, model: type, *criteria) -> int:
        """Bulk delete matching rows. Returns the number of rows removed."""
        try:
            result = await self.db.execute(delete(model).where(*criteria))
        except SQLAlchemyError as e:
            raise self._unavailable("delete_where", e)
        return result.rowcount

    # ─── Transactions ───────────────────────────────────

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.rollback()
            raise self._unavailable("commit", e)

    async def rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            raise self._unavailable("rollback", e)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["Store"]:
        """Commit everything done inside the block, or nothing at all."""
        try:
            yield self
        except Exception:
            await self.rollback()
            raise
        await self.commit()

    def _unavailable(self, operation: str, error: SQLAlchemyError) -> StorageUnavailable:
        logger.error("store.unavailable", operation=operation, error=str(error))
        return StorageUnavailable(f"Storage error during {operation}")
