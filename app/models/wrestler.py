"""
Wrestler model, the hub of every many-to-many relation in the roster.

Architecture:
    Wrestler ←→ WrestlerPromotion ←→ Promotion
    Wrestler ←→ WrestlerFaction ←→ Faction
    Wrestler ←→ WrestlerChampionship ←→ Championship

Relation sets are not stored on the row; they are assembled by
``AssociationManager`` from the junction tables.
"""

from app.models.base import Base, IdMixin, ImageMixin, NamedMixin, TimestampMixin


class Wrestler(Base, IdMixin, NamedMixin, ImageMixin, TimestampMixin):
    __tablename__ = "wrestlers"

    def __repr__(self):
        return f"<Wrestler(id={self.id}, name='{self.name}')>"
