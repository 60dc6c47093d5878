from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.kinds import EntityKind
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("db_handlers.entity")


class EntityDBHandler(BaseDBHandler):
    """Queries for one entity table, always ordered by name."""

    def __init__(self, kind: EntityKind, client: DatabaseClient):
        super().__init__(kind.model, client)
        self.kind = kind

    def column_names(self, include_image: bool = True) -> list[str]:
        """Columns to read and return. ``image_url`` is dropped when unsupported."""
        names = [column.name for column in self.table.c]
        if not include_image:
            names = [name for name in names if name != "image_url"]
        return names

    @check_local_db
    async def list_by_name(
        self, *, include_image: bool = True, db: AsyncSession = None
    ) -> list[dict[str, Any]]:
        return await self.get_multi(
            columns=self.column_names(include_image),
            order_by=self.table.c.name.asc(),
            db=db,
        )

    @check_local_db
    async def get_by_ids(
        self,
        ids: Iterable[int],
        *,
        include_image: bool = True,
        db: AsyncSession = None,
    ) -> list[dict[str, Any]]:
        return await self.get_multi_by_ids(
            ids,
            columns=self.column_names(include_image),
            order_by=self.table.c.name.asc(),
            db=db,
        )
