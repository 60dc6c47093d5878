"""
This file contains shared fixtures and configuration for the test suite.

Pytest will automatically discover and use the fixtures defined in this file.

Database fixtures run against a throwaway SQLite file per test (through
aiosqlite), so the junction cascades and the column inspection behave like
they do on the hosted database. Storage requests never leave the process:
they are answered by an ``httpx.MockTransport``.
"""

import json
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from app.config import Settings
from app.db import DatabaseClient
from app.models.kinds import EntityKind
from app.services.association_service import AssociationManager
from app.services.capabilities import SchemaCapabilities
from app.services.entity_store import EntityStore
from app.services.image_service import ImagePipeline
from app.services.roster_service import RosterService
from app.services.storage_client import StorageClient

STORAGE_URL = "https://storage.test/storage/v1"


class FakeStorage:
    """In-process stand-in for the storage REST API, recording every request."""

    def __init__(self):
        self.buckets: dict[str, dict] = {}
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.fail_uploads = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/storage/v1")

        if request.method == "GET" and path.startswith("/bucket/"):
            bucket = path.removeprefix("/bucket/")
            if bucket not in self.buckets:
                return httpx.Response(404, json={"error": "Bucket not found"})
            return httpx.Response(200, json=self.buckets[bucket])

        if request.method == "POST" and path == "/bucket":
            payload = json.loads(request.content)
            self.buckets[payload["id"]] = payload
            return httpx.Response(200, json={"name": payload["id"]})

        if request.method == "POST" and path.startswith("/object/"):
            if self.fail_uploads:
                return httpx.Response(500, json={"error": "storage unavailable"})
            key = path.removeprefix("/object/")
            self.objects[key] = request.content
            return httpx.Response(200, json={"Key": key})

        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'roster.db'}"


@pytest.fixture
def settings(database_url) -> Settings:
    return Settings(
        database_url=database_url,
        storage_url=STORAGE_URL,
        storage_service_key="service-key",
        storage_max_file_size=1024,
    )


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest_asyncio.fixture
async def storage(fake_storage) -> AsyncGenerator[StorageClient, None]:
    client = StorageClient(
        STORAGE_URL, "service-key", transport=fake_storage.transport()
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def db_client(database_url) -> AsyncGenerator[DatabaseClient, None]:
    client = DatabaseClient(database_url)
    await client.init_db()
    yield client
    await client.close()


@pytest_asyncio.fixture
async def capabilities(db_client) -> SchemaCapabilities:
    return await SchemaCapabilities.probe(db_client)


@pytest.fixture
def stores(db_client, capabilities) -> dict[EntityKind, EntityStore]:
    return {kind: EntityStore(kind, db_client, capabilities) for kind in EntityKind}


@pytest.fixture
def associations(db_client, stores) -> AssociationManager:
    return AssociationManager(db_client, stores)


@pytest.fixture
def images(storage, settings, capabilities) -> ImagePipeline:
    return ImagePipeline(storage, settings, capabilities)


@pytest.fixture
def roster(stores, associations, images) -> RosterService:
    return RosterService(stores, associations, images)
