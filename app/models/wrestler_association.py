"""
Junction models linking wrestlers to promotions, factions and championships.

Each junction row is the bare pair of ids. The pair is the primary key, so a
wrestler cannot be linked to the same entity twice. Both sides cascade on
delete: removing a wrestler or the linked entity removes the link rows.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer

from app.models.base import Base


class WrestlerPromotion(Base):
    __tablename__ = "wrestler_promotions"
    __table_args__ = (Index("ix_wrestler_promotions_promotion_id", "promotion_id"),)

    wrestler_id = Column(
        Integer,
        ForeignKey("wrestlers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    promotion_id = Column(
        Integer,
        ForeignKey("promotions.id", ondelete="CASCADE"),
        primary_key=True,
    )

    def __repr__(self):
        return f"<WrestlerPromotion(wrestler_id={self.wrestler_id}, promotion_id={self.promotion_id})>"


class WrestlerFaction(Base):
    __tablename__ = "wrestler_factions"
    __table_args__ = (Index("ix_wrestler_factions_faction_id", "faction_id"),)

    wrestler_id = Column(
        Integer,
        ForeignKey("wrestlers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    faction_id = Column(
        Integer,
        ForeignKey("factions.id", ondelete="CASCADE"),
        primary_key=True,
    )

    def __repr__(self):
        return f"<WrestlerFaction(wrestler_id={self.wrestler_id}, faction_id={self.faction_id})>"


class WrestlerChampionship(Base):
    __tablename__ = "wrestler_championships"
    __table_args__ = (
        Index("ix_wrestler_championships_championship_id", "championship_id"),
    )

    wrestler_id = Column(
        Integer,
        ForeignKey("wrestlers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    championship_id = Column(
        Integer,
        ForeignKey("championships.id", ondelete="CASCADE"),
        primary_key=True,
    )

    def __repr__(self):
        return f"<WrestlerChampionship(wrestler_id={self.wrestler_id}, championship_id={self.championship_id})>"
