"""
Schema capability descriptor.

Some deployments were created before entity images existed, so their
``promotions`` / ``factions`` / ``wrestlers`` tables may lack ``image_url``.
The descriptor is probed once at startup from the live schema (or forced
from configuration) and consulted before every read and write of the column.
It also carries the session-wide image upload switch that a failed upload
turns off until the admin reloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.models.kinds import EntityKind
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("capabilities")

IMAGE_COLUMN = "image_url"


def image_tables() -> list[str]:
    return [kind.plural for kind in EntityKind if kind.supports_image]


@dataclass
class SchemaCapabilities:
    image_columns: dict[str, bool] = field(
        default_factory=lambda: {table: True for table in image_tables()}
    )
    image_uploads_enabled: bool = True
    forced_image_support: bool | None = None

    @classmethod
    async def probe(
        cls,
        client: DatabaseClient,
        *,
        forced_image_support: bool | None = None,
        uploads_available: bool = True,
    ) -> SchemaCapabilities:
        capabilities = cls(
            image_uploads_enabled=uploads_available,
            forced_image_support=forced_image_support,
        )
        await capabilities.refresh(client)
        return capabilities

    async def refresh(self, client: DatabaseClient) -> None:
        """Re-read column support for every image table."""
        for table in image_tables():
            try:
                self.image_columns[table] = await self._detect(client, table)
            except Exception as e:
                logger.error(
                    f"Could not inspect columns of '{table}': {e}", exc_info=True
                )
                self.image_columns[table] = False
        logger.info(f"Image column support: {self.image_columns}")

    async def _detect(self, client: DatabaseClient, table: str) -> bool:
        if self.forced_image_support is not None:
            return self.forced_image_support
        return IMAGE_COLUMN in await client.get_table_columns(table)

    async def recheck_image_column(self, client: DatabaseClient, table: str) -> bool:
        """Confirm a table still has the image column after a failed write.

        Returns True when support was lost, i.e. the caller should retry
        without the column.
        """
        if not self.image_columns.get(table, False):
            return False
        try:
            if await self._detect(client, table):
                return False
        except Exception as e:
            logger.error(f"Could not re-inspect columns of '{table}': {e}")
            return False
        self.mark_image_column_unsupported(table)
        return True

    def supports_image(self, kind: EntityKind) -> bool:
        return kind.supports_image and self.image_columns.get(kind.plural, False)

    def mark_image_column_unsupported(self, table: str) -> None:
        logger.warning(
            f"Table '{table}' has no {IMAGE_COLUMN} column; images are disabled for it this session."
        )
        self.image_columns[table] = False

    def disable_image_uploads(self) -> None:
        if self.image_uploads_enabled:
            logger.warning("Image uploads disabled for this session after a failed upload.")
        self.image_uploads_enabled = False

    async def reload(self, client: DatabaseClient, *, uploads_available: bool = True) -> None:
        """Forget session-discovered failures and probe again."""
        self.image_uploads_enabled = uploads_available
        await self.refresh(client)

    def to_dict(self) -> dict:
        return {
            "image_columns": dict(self.image_columns),
            "image_uploads_enabled": self.image_uploads_enabled,
        }
