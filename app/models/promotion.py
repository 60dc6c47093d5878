"""Promotion model: a wrestling company wrestlers can be signed to."""

from app.models.base import Base, IdMixin, ImageMixin, NamedMixin, TimestampMixin


class Promotion(Base, IdMixin, NamedMixin, ImageMixin, TimestampMixin):
    __tablename__ = "promotions"

    def __repr__(self):
        return f"<Promotion(id={self.id}, name='{self.name}')>"
