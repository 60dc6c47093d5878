"""
Database models for the wrestling roster admin backend.

Architecture: Wrestler is linked many-to-many to Promotion, Faction and
Championship through one junction table per relation.
"""

from app.models.base import Base
from app.models.championship import Championship
from app.models.faction import Faction
from app.models.kinds import RELATIONS, EntityKind, RelationKind, RelationSpec
from app.models.promotion import Promotion
from app.models.wrestler import Wrestler
from app.models.wrestler_association import (
    WrestlerChampionship,
    WrestlerFaction,
    WrestlerPromotion,
)

__all__ = [
    "Base",
    # Entity models
    "Wrestler",
    "Promotion",
    "Faction",
    "Championship",
    # Association models
    "WrestlerPromotion",
    "WrestlerFaction",
    "WrestlerChampionship",
    # Kinds
    "EntityKind",
    "RelationKind",
    "RelationSpec",
    "RELATIONS",
]
