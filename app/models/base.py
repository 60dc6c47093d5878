"""
Base configurations and mixins for database models.

This module provides the foundation for all database models in the admin
backend: the declarative base and the mixins shared by every entity table.

Tables are declared without a schema. When the deployment keeps them in a
dedicated schema, ``DatabaseClient`` maps them there with
``schema_translate_map``.
"""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now


Base = declarative_base()


class IdMixin:
    """Auto-incrementing integer primary key."""

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Primary key",
    )


class NamedMixin:
    """Required display name; every entity list is ordered by it."""

    name = Column(
        String(255),
        nullable=False,
        index=True,
        comment="Display name",
    )


class TimestampMixin:
    """
    Creation and modification timestamps.

    ``created_at`` is filled by the database on insert. ``updated_at`` stays
    empty until the first update, which stamps it explicitly.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp when the record was last updated",
    )


class ImageMixin:
    """
    Optional image reference.

    Older deployments may lack this column; writes and reads consult
    ``SchemaCapabilities`` before touching it.
    """

    image_url = Column(
        String(1024),
        nullable=True,
        comment="Public URL of the entity image",
    )


__all__ = ["Base", "IdMixin", "NamedMixin", "TimestampMixin", "ImageMixin"]
