"""
Async client for the object storage REST API of the hosted database platform.

All requests carry the service key, so uploads bypass row/object level
access checks; the key must only ever live on the server.

Endpoints used (relative to ``STORAGE_URL``, typically ``.../storage/v1``):
    GET  /bucket/{id}                  bucket existence
    POST /bucket                       bucket creation
    POST /object/{bucket}/{path}       object upload
    /object/public/{bucket}/{path}     public URL (no request needed)
"""

import httpx

from app.config import Settings
from app.utils.logger import setup_logger

logger = setup_logger("storage_client")


class StorageClient:
    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> "StorageClient | None":
        if not settings.storage_configured:
            return None
        return cls(
            settings.storage_url,
            settings.storage_service_key,
            timeout=settings.storage_timeout,
            transport=transport,
        )

    async def bucket_exists(self, bucket: str) -> bool:
        response = await self._client.get(f"/bucket/{bucket}")
        # The storage API answers a missing bucket with 400 or 404 depending on version
        if response.status_code in (400, 404):
            return False
        response.raise_for_status()
        return True

    async def create_bucket(
        self,
        bucket: str,
        *,
        public: bool = True,
        file_size_limit: int | None = None,
        allowed_mime_types: list[str] | None = None,
    ) -> None:
        payload = {"id": bucket, "name": bucket, "public": public}
        if file_size_limit is not None:
            payload["file_size_limit"] = file_size_limit
        if allowed_mime_types:
            payload["allowed_mime_types"] = allowed_mime_types

        response = await self._client.post("/bucket", json=payload)
        response.raise_for_status()
        logger.info(f"Created storage bucket '{bucket}' (public={public})")

    async def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool = True,
    ) -> str:
        """Upload bytes under ``path`` and return the stored key."""
        response = await self._client.post(
            f"/object/{bucket}/{path}",
            content=content,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )
        response.raise_for_status()
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{path}"

    async def aclose(self) -> None:
        await self._client.aclose()
