"""
Association manager for the wrestler junction relations.

Owns ``wrestler_promotions``, ``wrestler_factions`` and
``wrestler_championships``. Entity rows are only ever read through the
matching ``EntityStore``.

Replacement semantics:
    A wrestler's selection for a relation kind always replaces what was
    there before. The replacement runs in one transaction as prune-then-insert
    (drop links not in the new set, insert the missing ones in a single
    multi-row insert), so a failure leaves the previous links untouched and
    repeating the call with the same ids changes nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.wrestler_association import WrestlerAssociationDBHandler
from app.models.kinds import EntityKind, RelationKind
from app.services.entity_store import STORE_ERRORS, EntityStore
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("association_service")


class AssociationManager:
    def __init__(self, client: DatabaseClient, stores: Mapping[EntityKind, EntityStore]):
        self.client = client
        self.stores = stores
        self.db_handlers = {
            kind: WrestlerAssociationDBHandler(kind, client) for kind in RelationKind
        }

    async def get_associated_entities(
        self, wrestler_id: int, kind: RelationKind
    ) -> list[BaseModel]:
        """Entities of ``kind`` linked to a wrestler, ordered by name.

        Two steps: the linked ids, then one batch fetch of those entities.
        No links means no second query.
        """
        try:
            entity_ids = await self.db_handlers[kind].get_entity_ids(wrestler_id)
        except STORE_ERRORS as e:
            logger.error(
                f"Error fetching {kind.value} links of wrestler {wrestler_id}: {e}",
                exc_info=True,
            )
            return []

        if not entity_ids:
            return []
        return await self.stores[kind.entity_kind].get_many(entity_ids)

    async def get_relations(
        self, wrestler_id: int, kinds: Iterable[RelationKind] = tuple(RelationKind)
    ) -> dict[RelationKind, list[BaseModel]]:
        """Several relation kinds of one wrestler, fetched concurrently."""
        kinds = list(kinds)
        results = await asyncio.gather(
            *(self.get_associated_entities(wrestler_id, kind) for kind in kinds)
        )
        return dict(zip(kinds, results))

    async def replace_associations(
        self, wrestler_id: int, kind: RelationKind, new_ids: Iterable[int]
    ) -> bool:
        """Make ``new_ids`` the complete set of ``kind`` links for a wrestler."""
        return await self.replace_all_associations(wrestler_id, {kind: new_ids})

    async def replace_all_associations(
        self,
        wrestler_id: int,
        selections: Mapping[RelationKind, Iterable[int]],
    ) -> bool:
        """Replace several relation kinds of one wrestler in a single transaction."""
        try:
            async with self.client.session() as db:
                async with db.begin():
                    for kind, new_ids in selections.items():
                        await self._replace(db, wrestler_id, kind, new_ids)
        except STORE_ERRORS as e:
            logger.error(
                f"Error replacing associations of wrestler {wrestler_id}: {e}",
                exc_info=True,
            )
            return False
        return True

    async def _replace(
        self,
        db: AsyncSession,
        wrestler_id: int,
        kind: RelationKind,
        new_ids: Iterable[int],
    ) -> None:
        wanted = list(dict.fromkeys(new_ids))
        db_handler = self.db_handlers[kind]

        removed = await db_handler.delete_for_wrestler(
            wrestler_id, keep_ids=wanted, db=db
        )
        existing = set(await db_handler.get_entity_ids(wrestler_id, db=db))
        added = await db_handler.bulk_create_associations(
            wrestler_id, [entity_id for entity_id in wanted if entity_id not in existing], db=db
        )
        logger.debug(
            f"Wrestler {wrestler_id} {kind.value} links: -{removed} +{added} (now {len(wanted)})"
        )

    async def count_associated(self, entity_id: int, kind: RelationKind) -> int:
        """Number of wrestlers linked to an entity, via a count-only query."""
        try:
            return await self.db_handlers[kind].count_for_entity(entity_id)
        except STORE_ERRORS as e:
            logger.error(
                f"Error getting count for {kind.value} {entity_id}: {e}", exc_info=True
            )
            return 0

    async def count_all(self, kind: RelationKind) -> dict[int, int]:
        """Wrestler counts for every linked entity of ``kind``; unlinked ids are absent."""
        try:
            return await self.db_handlers[kind].count_by_entity()
        except STORE_ERRORS as e:
            logger.error(f"Error getting {kind.value} counts: {e}", exc_info=True)
            return {}

    async def get_associated_wrestlers(
        self, entity_id: int, kind: RelationKind
    ) -> list[BaseModel]:
        """Wrestlers linked to an entity, each carrying its other two relation kinds."""
        try:
            wrestler_ids = await self.db_handlers[kind].get_wrestler_ids(entity_id)
        except STORE_ERRORS as e:
            logger.error(
                f"Error fetching wrestlers of {kind.value} {entity_id}: {e}",
                exc_info=True,
            )
            return []

        if not wrestler_ids:
            return []

        wrestlers = await self.stores[EntityKind.WRESTLER].get_many(wrestler_ids)
        other_kinds = [other for other in RelationKind if other is not kind]
        relations = await asyncio.gather(
            *(self.get_relations(wrestler.id, other_kinds) for wrestler in wrestlers)
        )
        return [
            wrestler.model_copy(
                update={other.field: related[other] for other in other_kinds}
            )
            for wrestler, related in zip(wrestlers, relations)
        ]
