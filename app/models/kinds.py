"""
Entity and relation kinds, and the tables behind each of them.

``RelationKind`` names the three junction relations a wrestler takes part
in. ``RELATIONS`` maps each kind to its entity model, its junction model and
the junction column pointing at the entity.
"""

from dataclasses import dataclass
from enum import Enum

from app.models.base import Base
from app.models.championship import Championship
from app.models.faction import Faction
from app.models.promotion import Promotion
from app.models.wrestler import Wrestler
from app.models.wrestler_association import (
    WrestlerChampionship,
    WrestlerFaction,
    WrestlerPromotion,
)


class EntityKind(str, Enum):
    WRESTLER = "wrestler"
    PROMOTION = "promotion"
    FACTION = "faction"
    CHAMPIONSHIP = "championship"

    @property
    def model(self) -> type[Base]:
        return ENTITY_MODELS[self]

    @property
    def plural(self) -> str:
        return self.model.__tablename__

    @property
    def supports_image(self) -> bool:
        return hasattr(self.model, "image_url")


class RelationKind(str, Enum):
    PROMOTION = "promotion"
    FACTION = "faction"
    CHAMPIONSHIP = "championship"

    @property
    def entity_kind(self) -> EntityKind:
        return EntityKind(self.value)

    @property
    def field(self) -> str:
        """Attribute name of this relation on a wrestler read model."""
        return self.entity_kind.plural


@dataclass(frozen=True)
class RelationSpec:
    entity_model: type[Base]
    junction_model: type[Base]
    entity_column: str


ENTITY_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.WRESTLER: Wrestler,
    EntityKind.PROMOTION: Promotion,
    EntityKind.FACTION: Faction,
    EntityKind.CHAMPIONSHIP: Championship,
}

RELATIONS: dict[RelationKind, RelationSpec] = {
    RelationKind.PROMOTION: RelationSpec(Promotion, WrestlerPromotion, "promotion_id"),
    RelationKind.FACTION: RelationSpec(Faction, WrestlerFaction, "faction_id"),
    RelationKind.CHAMPIONSHIP: RelationSpec(
        Championship, WrestlerChampionship, "championship_id"
    ),
}
