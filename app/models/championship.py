"""Championship model. Championships carry no image."""

from app.models.base import Base, IdMixin, NamedMixin, TimestampMixin


class Championship(Base, IdMixin, NamedMixin, TimestampMixin):
    __tablename__ = "championships"

    def __repr__(self):
        return f"<Championship(id={self.id}, name='{self.name}')>"
