# Entity store: CRUD for one entity table with the data-access error boundary.
#
# Every failure below this layer (driver errors, rejected statements,
# unreachable hosts) is logged here and turned into None / [] / False, so API
# handlers only ever see "it worked" or "it did not".

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from app.db_handlers.entity import EntityDBHandler
from app.models.kinds import EntityKind
from app.schemas import ChampionshipRead, FactionRead, PromotionRead, WrestlerRead
from app.services.capabilities import IMAGE_COLUMN, SchemaCapabilities
from app.services.query_filters import sort_by_name
from app.utils.logger import setup_logger

if TYPE_CHECKING:
    from app.db import DatabaseClient

logger = setup_logger("entity_store")

READ_MODELS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.WRESTLER: WrestlerRead,
    EntityKind.PROMOTION: PromotionRead,
    EntityKind.FACTION: FactionRead,
    EntityKind.CHAMPIONSHIP: ChampionshipRead,
}

# Errors that mean "the store could not answer": backend rejections and
# network failures surfacing as OSError from the driver.
STORE_ERRORS = (SQLAlchemyError, OSError)

ReadFn = Callable[[bool], Awaitable[Any]]
WriteFn = Callable[[dict[str, Any], bool], Awaitable[dict[str, Any] | None]]


class EntityStore:
    def __init__(
        self,
        kind: EntityKind,
        client: DatabaseClient,
        capabilities: SchemaCapabilities,
    ):
        self.kind = kind
        self.client = client
        self.capabilities = capabilities
        self.db_handler = EntityDBHandler(kind, client)
        self.read_model = READ_MODELS[kind]

    @property
    def label(self) -> str:
        return self.kind.value

    @property
    def image_supported(self) -> bool:
        return self.capabilities.supports_image(self.kind)

    def _to_read(self, row: dict[str, Any]) -> BaseModel:
        return self.read_model.model_validate(row)

    async def list(self) -> list[BaseModel]:
        """All records ordered by name; empty on failure."""
        try:
            rows = await self._read(
                lambda include_image: self.db_handler.list_by_name(
                    include_image=include_image
                )
            )
        except STORE_ERRORS as e:
            logger.error(f"Error fetching {self.kind.plural}: {e}", exc_info=True)
            return []
        return sort_by_name([self._to_read(row) for row in rows])

    async def get(self, id: int) -> BaseModel | None:
        try:
            row = await self._read(
                lambda include_image: self.db_handler.get(
                    id, columns=self.db_handler.column_names(include_image)
                )
            )
        except STORE_ERRORS as e:
            logger.error(f"Error fetching {self.label} {id}: {e}", exc_info=True)
            return None
        if row is None:
            logger.warning(f"{self.label.capitalize()} {id} not found")
            return None
        return self._to_read(row)

    async def get_many(self, ids: Iterable[int]) -> list[BaseModel]:
        """Records for ``ids`` in one batch query, ordered by name.

        Ids without a matching record are skipped.
        """
        ids = list(dict.fromkeys(ids))
        if not ids:
            return []
        try:
            rows = await self._read(
                lambda include_image: self.db_handler.get_by_ids(
                    ids, include_image=include_image
                )
            )
        except STORE_ERRORS as e:
            logger.error(f"Error fetching {self.kind.plural}: {e}", exc_info=True)
            return []
        if len(rows) < len(ids):
            logger.debug(
                f"{len(ids) - len(rows)} of {len(ids)} requested {self.kind.plural} no longer exist"
            )
        return sort_by_name([self._to_read(row) for row in rows])

    async def create(self, fields: dict[str, Any]) -> BaseModel | None:
        """Insert a record. ``name`` is required; ``image_url`` is written when given."""
        name = fields.get("name")
        if not name:
            raise ValueError(f"A {self.label} needs a name")

        values: dict[str, Any] = {"name": name}
        if fields.get(IMAGE_COLUMN) and self.kind.supports_image:
            values[IMAGE_COLUMN] = fields[IMAGE_COLUMN]

        async def write(values: dict[str, Any], include_image: bool):
            return await self.db_handler.create(
                values, columns=self.db_handler.column_names(include_image)
            )

        row = await self._write("create", write, values)
        if row is None:
            return None
        logger.info(f"Created {self.label} {row['id']} '{row['name']}'")
        return self._to_read(row)

    async def update(self, id: int, fields: dict[str, Any]) -> BaseModel | None:
        """Update a record and stamp ``updated_at``.

        ``image_url`` is written when the key is present, so passing None clears it.
        """
        values: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
        if "name" in fields:
            if not fields["name"]:
                raise ValueError(f"A {self.label} needs a name")
            values["name"] = fields["name"]
        if IMAGE_COLUMN in fields and self.kind.supports_image:
            values[IMAGE_COLUMN] = fields[IMAGE_COLUMN]

        async def write(values: dict[str, Any], include_image: bool):
            return await self.db_handler.update(
                id, values, columns=self.db_handler.column_names(include_image)
            )

        row = await self._write("update", write, values)
        if row is None:
            return None
        logger.info(f"Updated {self.label} {id}")
        return self._to_read(row)

    async def delete(self, id: int) -> bool:
        """Delete by id. Junction rows are left to the database's cascade rules."""
        try:
            deleted = await self.db_handler.remove(id)
        except STORE_ERRORS as e:
            logger.error(f"Error deleting {self.label} {id}: {e}", exc_info=True)
            return False
        if not deleted:
            logger.warning(f"Cannot delete {self.label} {id}: not found")
            return False
        logger.info(f"Deleted {self.label} {id}")
        return True

    async def _read(self, read: ReadFn) -> Any:
        """Run a read, retrying once without the image column if the table lacks it.

        Errors that are not explained by a missing column propagate.
        """
        include_image = self.image_supported
        try:
            return await read(include_image)
        except STORE_ERRORS:
            if not (
                include_image
                and await self.capabilities.recheck_image_column(
                    self.client, self.kind.plural
                )
            ):
                raise
        logger.warning(f"Retrying read of {self.kind.plural} without {IMAGE_COLUMN}")
        return await read(False)

    async def _write(
        self, action: str, write: WriteFn, values: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Run a write, retrying once without the image column if the table lacks it."""
        include_image = self.image_supported
        if not include_image:
            values.pop(IMAGE_COLUMN, None)

        try:
            row = await write(values, include_image)
        except STORE_ERRORS as e:
            if include_image and await self.capabilities.recheck_image_column(
                self.client, self.kind.plural
            ):
                logger.warning(
                    f"Retrying {action} of {self.label} without {IMAGE_COLUMN}"
                )
                values.pop(IMAGE_COLUMN, None)
                try:
                    row = await write(values, False)
                except STORE_ERRORS as retry_error:
                    logger.error(
                        f"Error in fallback {action} of {self.label}: {retry_error}",
                        exc_info=True,
                    )
                    return None
            else:
                logger.error(f"Error during {action} of {self.label}: {e}", exc_info=True)
                return None

        if row is None:
            logger.warning(f"Cannot {action} {self.label}: not found")
        return row
