from dataclasses import dataclass

from fastapi import Request

from app.config import Settings
from app.db import DatabaseClient
from app.models.kinds import EntityKind
from app.services.association_service import AssociationManager
from app.services.capabilities import SchemaCapabilities
from app.services.entity_store import EntityStore
from app.services.image_service import ImagePipeline
from app.services.roster_service import RosterService
from app.services.storage_client import StorageClient


@dataclass
class AppServices:
    """Everything the request handlers need, built once at startup."""

    settings: Settings
    db_client: DatabaseClient
    storage: StorageClient | None
    capabilities: SchemaCapabilities
    images: ImagePipeline
    roster: RosterService

    @classmethod
    async def build(
        cls,
        settings: Settings,
        db_client: DatabaseClient,
        storage: StorageClient | None,
    ) -> "AppServices":
        capabilities = await SchemaCapabilities.probe(
            db_client,
            forced_image_support=settings.image_column_support,
            uploads_available=storage is not None,
        )
        stores = {
            kind: EntityStore(kind, db_client, capabilities) for kind in EntityKind
        }
        images = ImagePipeline(storage, settings, capabilities)
        roster = RosterService(stores, AssociationManager(db_client, stores), images)
        return cls(settings, db_client, storage, capabilities, images, roster)

    async def reload_capabilities(self) -> SchemaCapabilities:
        await self.capabilities.reload(
            self.db_client, uploads_available=self.storage is not None
        )
        return self.capabilities


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_roster_service(request: Request) -> RosterService:
    return get_services(request).roster


def get_image_pipeline(request: Request) -> ImagePipeline:
    return get_services(request).images
