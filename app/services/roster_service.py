# Roster service: the operations behind each dashboard screen.
#
# Combines the entity stores, the association manager and the image pipeline.
# Wrestler saves are entity write → association replacement → reload, so the
# caller always gets the wrestler with its relations as stored.

import asyncio
from typing import Any

from pydantic import BaseModel

from app.models.kinds import EntityKind, RelationKind
from app.schemas import (
    ChampionshipWithCount,
    EntityForm,
    FactionWithCount,
    PromotionWithCount,
    WrestlerForm,
    WrestlerRead,
)
from app.services.association_service import AssociationManager
from app.services.entity_store import EntityStore
from app.services.image_service import ImagePipeline
from app.utils.logger import setup_logger

logger = setup_logger("roster_service")

COUNT_MODELS: dict[RelationKind, type[BaseModel]] = {
    RelationKind.PROMOTION: PromotionWithCount,
    RelationKind.FACTION: FactionWithCount,
    RelationKind.CHAMPIONSHIP: ChampionshipWithCount,
}


class RosterService:
    def __init__(
        self,
        stores: dict[EntityKind, EntityStore],
        associations: AssociationManager,
        images: ImagePipeline,
    ):
        self.stores = stores
        self.associations = associations
        self.images = images

    @property
    def wrestlers(self) -> EntityStore:
        return self.stores[EntityKind.WRESTLER]

    def store(self, kind: EntityKind) -> EntityStore:
        return self.stores[kind]

    # --- Wrestlers ---

    async def _with_relations(self, wrestler: WrestlerRead) -> WrestlerRead:
        relations = await self.associations.get_relations(wrestler.id)
        return wrestler.model_copy(
            update={kind.field: entities for kind, entities in relations.items()}
        )

    async def list_wrestlers(self) -> list[WrestlerRead]:
        """Every wrestler with promotions, factions and championships attached."""
        wrestlers = await self.wrestlers.list()
        return list(
            await asyncio.gather(*(self._with_relations(w) for w in wrestlers))
        )

    async def get_wrestler(self, wrestler_id: int) -> WrestlerRead | None:
        wrestler = await self.wrestlers.get(wrestler_id)
        if wrestler is None:
            return None
        return await self._with_relations(wrestler)

    async def _image_fields(self, form: EntityForm, folder: str) -> dict[str, Any]:
        """The ``image_url`` change a save carries, if any.

        New image data is uploaded while uploads are on. Otherwise the stored
        image is only touched when the form sets ``image_url`` explicitly.
        """
        if form.image_data and self.images.uploads_enabled:
            return {
                "image_url": await self.images.resolve_for_save(
                    form.image_data, form.image_url, folder
                )
            }
        if "image_url" in form.model_fields_set:
            return {"image_url": form.image_url}
        return {}

    @staticmethod
    def _selections(form: WrestlerForm) -> dict[RelationKind, list[int]]:
        return {kind: getattr(form, kind.field) for kind in RelationKind}

    async def create_wrestler(self, form: WrestlerForm) -> WrestlerRead | None:
        image_fields = await self._image_fields(form, EntityKind.WRESTLER.plural)
        wrestler = await self.wrestlers.create({"name": form.name, **image_fields})
        if wrestler is None:
            return None

        selections = self._selections(form)
        if any(selections.values()) and not await self.associations.replace_all_associations(
            wrestler.id, selections
        ):
            logger.error(
                f"Associations of new wrestler {wrestler.id} could not be saved; removing it"
            )
            await self.wrestlers.delete(wrestler.id)
            return None
        return await self.get_wrestler(wrestler.id)

    async def update_wrestler(
        self, wrestler_id: int, form: WrestlerForm
    ) -> WrestlerRead | None:
        """Update fields and replace all three relation kinds with the form's selection."""
        image_fields = await self._image_fields(form, EntityKind.WRESTLER.plural)
        wrestler = await self.wrestlers.update(
            wrestler_id, {"name": form.name, **image_fields}
        )
        if wrestler is None:
            return None

        if not await self.associations.replace_all_associations(
            wrestler_id, self._selections(form)
        ):
            return None
        return await self.get_wrestler(wrestler_id)

    async def delete_wrestler(self, wrestler_id: int) -> bool:
        return await self.wrestlers.delete(wrestler_id)

    # --- Promotions, factions, championships ---

    async def create_entity(self, kind: EntityKind, form: EntityForm) -> BaseModel | None:
        fields = {"name": form.name}
        if kind.supports_image:
            fields.update(await self._image_fields(form, kind.plural))
        return await self.store(kind).create(fields)

    async def update_entity(
        self, kind: EntityKind, entity_id: int, form: EntityForm
    ) -> BaseModel | None:
        fields = {"name": form.name}
        if kind.supports_image:
            fields.update(await self._image_fields(form, kind.plural))
        return await self.store(kind).update(entity_id, fields)

    async def delete_entity(self, kind: EntityKind, entity_id: int) -> bool:
        return await self.store(kind).delete(entity_id)

    async def list_with_counts(self, kind: RelationKind) -> list[BaseModel]:
        """Entities of ``kind`` ordered by name, each with its wrestler count."""
        entities, counts = await asyncio.gather(
            self.store(kind.entity_kind).list(),
            self.associations.count_all(kind),
        )
        count_model = COUNT_MODELS[kind]
        return [
            count_model(**entity.model_dump(), wrestler_count=counts.get(entity.id, 0))
            for entity in entities
        ]

    async def wrestlers_for(self, kind: RelationKind, entity_id: int) -> list[WrestlerRead]:
        return await self.associations.get_associated_wrestlers(entity_id, kind)
