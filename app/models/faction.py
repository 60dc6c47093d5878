"""Faction model: a stable or tag team grouping wrestlers."""

from app.models.base import Base, IdMixin, ImageMixin, NamedMixin, TimestampMixin


class Faction(Base, IdMixin, NamedMixin, ImageMixin, TimestampMixin):
    __tablename__ = "factions"

    def __repr__(self):
        return f"<Faction(id={self.id}, name='{self.name}')>"
