from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.kinds import RELATIONS, RelationKind
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("db_handlers.wrestler_association")


class WrestlerAssociationDBHandler(BaseDBHandler):
    """Queries for one wrestler junction table (promotions, factions or championships)."""

    def __init__(self, kind: RelationKind, client: DatabaseClient):
        relation = RELATIONS[kind]
        super().__init__(relation.junction_model, client)
        self.kind = kind
        self.entity_column = self.table.c[relation.entity_column]
        self.wrestler_column = self.table.c.wrestler_id

    @check_local_db
    async def get_entity_ids(
        self, wrestler_id: int, *, db: AsyncSession = None
    ) -> list[int]:
        """Ids of the entities linked to ``wrestler_id``."""
        stmt = select(self.entity_column).where(self.wrestler_column == wrestler_id)
        result = await db.execute(stmt)
        return list(result.scalars())

    @check_local_db
    async def get_wrestler_ids(
        self, entity_id: int, *, db: AsyncSession = None
    ) -> list[int]:
        """Ids of the wrestlers linked to ``entity_id``."""
        stmt = select(self.wrestler_column).where(self.entity_column == entity_id)
        result = await db.execute(stmt)
        return list(result.scalars())

    @check_local_db
    async def delete_for_wrestler(
        self,
        wrestler_id: int,
        *,
        keep_ids: Iterable[int] = (),
        db: AsyncSession = None,
    ) -> int:
        """Delete the wrestler's links except those pointing at ``keep_ids``."""
        keep_ids = list(keep_ids)
        stmt = delete(self.table).where(self.wrestler_column == wrestler_id)
        if keep_ids:
            stmt = stmt.where(self.entity_column.not_in(keep_ids))
        try:
            result = await db.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(
                f"Error deleting {self.kind.value} links of wrestler {wrestler_id}: {e}"
            )
            raise

    @check_local_db
    async def bulk_create_associations(
        self, wrestler_id: int, entity_ids: Iterable[int], *, db: AsyncSession = None
    ) -> int:
        """Insert one link row per entity id in a single multi-row statement."""
        rows = [
            {"wrestler_id": wrestler_id, self.entity_column.name: entity_id}
            for entity_id in entity_ids
        ]
        if not rows:
            return 0

        try:
            await db.execute(insert(self.table), rows)
            logger.debug(
                f"Bulk inserted {len(rows)} wrestler-{self.kind.value} associations"
            )
            return len(rows)
        except SQLAlchemyError as e:
            logger.error(
                f"Error bulk creating wrestler-{self.kind.value} associations: {e}"
            )
            raise

    @check_local_db
    async def count_for_entity(self, entity_id: int, *, db: AsyncSession = None) -> int:
        return await self.count(db=db, **{self.entity_column.name: entity_id})

    @check_local_db
    async def count_by_entity(self, *, db: AsyncSession = None) -> dict[int, int]:
        """Link counts for every linked entity in one grouped query."""
        stmt = select(self.entity_column, func.count()).group_by(self.entity_column)
        result = await db.execute(stmt)
        return {entity_id: count for entity_id, count in result}
