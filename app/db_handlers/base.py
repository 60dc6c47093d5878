from __future__ import annotations

import asyncio
from collections.abc import Iterable
from functools import wraps
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("db_handlers")


ModelType = TypeVar("ModelType", bound=Base)


def check_local_db(func):
    """Database session decorator with transaction management and retry logic.

    The decorated coroutine must be a method of an object exposing ``client``
    (a ``DatabaseClient``). When the caller passes ``db=`` the call joins the
    caller's session and the caller owns the transaction.
    """

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        if kwargs.get("db"):
            return await func(self, *args, **kwargs)

        last_exception = None
        for attempt in range(3):
            async with self.client.session() as db:
                kwargs["db"] = db
                try:
                    result = await func(self, *args, **kwargs)
                    await db.commit()
                    return result
                except DBAPIError as e:
                    await db.rollback()
                    if isinstance(e.orig, ConnectionDoesNotExistError):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} (attempt {attempt + 1}/3): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    logger.error(
                        f"DBAPIError in {func.__name__} (attempt {attempt + 1}/3): {e}"
                    )
                    raise
                except Exception as e:
                    await db.rollback()
                    logger.error(
                        f"Transaction failed in {func.__name__} (attempt {attempt + 1}/3): {e}"
                    )
                    raise

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler issuing single-statement queries against one table.

    Rows come back as plain dictionaries restricted to the requested
    ``columns`` (all table columns by default), so callers can leave out
    columns the live table does not have.
    """

    def __init__(self, model: type[ModelType], client: DatabaseClient):
        self.model = model
        self.client = client

    @property
    def table(self):
        return self.model.__table__

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def _columns(self, columns: Iterable[str] | None = None) -> list:
        table_columns = self.table.c
        if columns is None:
            return list(table_columns)
        return [table_columns[name] for name in columns]

    @staticmethod
    def _row_to_dict(row) -> dict[str, Any]:
        return dict(row._mapping)

    @check_local_db
    async def get(
        self,
        id: Any,
        *,
        columns: Iterable[str] | None = None,
        db: AsyncSession = None,
    ) -> dict[str, Any] | None:
        """Get a single record by its primary key."""
        stmt = select(*self._columns(columns)).where(self.table.c.id == id)
        result = await db.execute(stmt)
        row = result.first()
        return self._row_to_dict(row) if row else None

    @check_local_db
    async def get_multi(
        self,
        *,
        columns: Iterable[str] | None = None,
        order_by=None,
        db: AsyncSession = None,
    ) -> list[dict[str, Any]]:
        """Get every record, optionally ordered."""
        stmt = select(*self._columns(columns))
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await db.execute(stmt)
        return [self._row_to_dict(row) for row in result]

    @check_local_db
    async def get_multi_by_ids(
        self,
        ids: Iterable[Any],
        *,
        columns: Iterable[str] | None = None,
        order_by=None,
        db: AsyncSession = None,
    ) -> list[dict[str, Any]]:
        """Get the records whose primary key is in ``ids`` with one IN query."""
        ids = list(ids)
        if not ids:
            return []

        stmt = select(*self._columns(columns)).where(self.table.c.id.in_(ids))
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await db.execute(stmt)
        return [self._row_to_dict(row) for row in result]

    @check_local_db
    async def create(
        self,
        obj_dict: dict[str, Any],
        *,
        columns: Iterable[str] | None = None,
        db: AsyncSession = None,
    ) -> dict[str, Any]:
        """Insert a record and return the stored row."""
        stmt = insert(self.table).values(**obj_dict).returning(*self._columns(columns))
        try:
            result = await db.execute(stmt)
            return self._row_to_dict(result.one())
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    @check_local_db
    async def update(
        self,
        id: Any,
        update_data: dict[str, Any],
        *,
        columns: Iterable[str] | None = None,
        db: AsyncSession = None,
    ) -> dict[str, Any] | None:
        """Update a record by primary key and return the stored row, or None if absent."""
        stmt = (
            update(self.table)
            .where(self.table.c.id == id)
            .values(**update_data)
            .returning(*self._columns(columns))
        )
        try:
            result = await db.execute(stmt)
            row = result.first()
            return self._row_to_dict(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model.__name__} with id {id}: {e}")
            raise

    @check_local_db
    async def remove(self, id: Any, *, db: AsyncSession = None) -> bool:
        """Delete a record by primary key. Returns whether a row was deleted."""
        stmt = delete(self.table).where(self.table.c.id == id)
        try:
            result = await db.execute(stmt)
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error removing {self.model.__name__} with id {id}: {e}")
            raise

    @check_local_db
    async def count(self, *, db: AsyncSession = None, **filters) -> int:
        """Count rows matching equality filters without loading them."""
        stmt = select(func.count()).select_from(self.table)
        for key, value in filters.items():
            stmt = stmt.where(self.table.c[key] == value)
        result = await db.execute(stmt)
        return result.scalar_one()
