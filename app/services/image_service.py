"""
Image asset pipeline: selected file → base64 data URL → privileged upload → public URL.

Upload lifecycle (one ``ImageUpload`` per attempt):
    IDLE → FILE_SELECTED → ENCODING → UPLOADING → SUCCEEDED(url) | FAILED

A failed upload never fails the entity save around it. The save goes on
with the image cleared, and uploads stay off for the rest of the session
(see ``SchemaCapabilities.disable_image_uploads``).
"""

import base64
import binascii
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import httpx

from app.config import Settings
from app.services.capabilities import SchemaCapabilities
from app.services.storage_client import StorageClient
from app.utils.logger import setup_logger

logger = setup_logger("image_service")

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}
DEFAULT_MIME_TYPE = "image/jpeg"


class ImageValidationError(ValueError):
    """The payload is not an acceptable image."""


def encode_data_url(content: bytes, content_type: str) -> str:
    """Encode raw bytes as a base64 data URL, entirely locally."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_data_url(data: str) -> tuple[bytes, str]:
    """Decode a data URL (or bare base64, assumed JPEG) into bytes and MIME type."""
    content_type = DEFAULT_MIME_TYPE
    payload = data
    if data.startswith("data:"):
        header, sep, payload = data.partition(",")
        if not sep or ";base64" not in header:
            raise ImageValidationError("Image data must be a base64 data URL")
        content_type = header[len("data:") :].split(";", 1)[0] or DEFAULT_MIME_TYPE

    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageValidationError(f"Invalid base64 image data: {e}") from e
    if not content:
        raise ImageValidationError("Image data is empty")
    return content, content_type


def random_object_key(folder: str, content_type: str) -> str:
    """``{folder}/{random}_{millis}.{ext}``, unique enough to never collide in practice."""
    extension = MIME_EXTENSIONS.get(content_type, "jpg")
    return f"{folder}/{uuid.uuid4().hex[:13]}_{int(time.time() * 1000)}.{extension}"


class ImagePipeline:
    """Server-side half of the pipeline: validation, storage and public URLs."""

    def __init__(
        self,
        storage: StorageClient | None,
        settings: Settings,
        capabilities: SchemaCapabilities,
    ):
        self.storage = storage
        self.settings = settings
        self.capabilities = capabilities
        self.bucket = settings.storage_bucket

    @property
    def available(self) -> bool:
        return self.storage is not None

    @property
    def uploads_enabled(self) -> bool:
        return self.available and self.capabilities.image_uploads_enabled

    async def ensure_bucket(self) -> bool:
        """Create the public image bucket with its size and MIME constraints if missing."""
        if self.storage is None:
            logger.warning("Storage is not configured; skipping bucket setup.")
            return False
        try:
            if await self.storage.bucket_exists(self.bucket):
                logger.debug(f"Storage bucket '{self.bucket}' already exists")
                return True
            await self.storage.create_bucket(
                self.bucket,
                public=True,
                file_size_limit=self.settings.storage_max_file_size,
                allowed_mime_types=self.settings.storage_allowed_mime_types,
            )
            return True
        except httpx.HTTPError as e:
            logger.error(f"Error setting up storage bucket '{self.bucket}': {e}")
            return False

    def validate(self, content: bytes, content_type: str) -> None:
        if content_type not in self.settings.storage_allowed_mime_types:
            raise ImageValidationError(f"Unsupported image type '{content_type}'")
        if len(content) > self.settings.storage_max_file_size:
            raise ImageValidationError(
                f"Image is {len(content)} bytes; the limit is {self.settings.storage_max_file_size}"
            )

    async def upload_base64(self, data: str, folder: str = "wrestlers") -> str | None:
        """Decode, store under a random key in ``folder`` and return the public URL.

        Returns None on any failure.
        """
        if self.storage is None:
            logger.error("Image upload requested but storage is not configured")
            return None

        try:
            content, content_type = decode_data_url(data)
            self.validate(content, content_type)
        except ImageValidationError as e:
            logger.error(f"Rejected image upload to '{folder}': {e}")
            return None

        key = random_object_key(folder, content_type)
        try:
            await self.storage.upload_object(
                self.bucket, key, content, content_type=content_type
            )
        except httpx.HTTPError as e:
            logger.error(f"Server error uploading image '{key}': {e}")
            return None

        url = self.storage.get_public_url(self.bucket, key)
        logger.info(f"Uploaded image {key} ({len(content)} bytes)")
        return url

    async def resolve_for_save(
        self, image_data: str | None, image_url: str | None, folder: str
    ) -> str | None:
        """Image URL to store with an entity being saved.

        Without new image data the current URL is kept. With new data the
        upload is attempted unless uploads are off for the session; if it
        fails the image is cleared and uploads are turned off.
        """
        if not image_data:
            return image_url
        if not self.uploads_enabled:
            logger.info(f"Skipping image upload to '{folder}': uploads are disabled")
            return image_url

        url = await self.upload_base64(image_data, folder)
        if url is None:
            self.capabilities.disable_image_uploads()
        return url


class UploadState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    ENCODING = "encoding"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedImage:
    filename: str | None
    content_type: str
    content: bytes


class ImageUpload:
    """One upload attempt, from file selection to a public URL."""

    def __init__(self):
        self.state = UploadState.IDLE
        self.file: SelectedImage | None = None
        self.data_url: str | None = None
        self.url: str | None = None

    def _require(self, *states: UploadState) -> None:
        if self.state not in states:
            raise RuntimeError(
                f"Cannot move from {self.state.value} state; expected one of "
                f"{[state.value for state in states]}"
            )

    def select(self, files: Sequence[SelectedImage]) -> SelectedImage:
        """Pick the first of the selected or dropped files."""
        self._require(UploadState.IDLE, UploadState.FILE_SELECTED)
        if not files:
            raise ValueError("No file selected")
        self.file = files[0]
        if len(files) > 1:
            logger.debug(f"{len(files)} files selected; using '{self.file.filename}'")
        self.state = UploadState.FILE_SELECTED
        return self.file

    def encode(self) -> str:
        self._require(UploadState.FILE_SELECTED)
        self.state = UploadState.ENCODING
        self.data_url = encode_data_url(self.file.content, self.file.content_type)
        return self.data_url

    async def upload(self, pipeline: ImagePipeline, folder: str) -> str | None:
        self._require(UploadState.ENCODING)
        self.state = UploadState.UPLOADING
        self.url = await pipeline.upload_base64(self.data_url, folder)
        self.state = UploadState.SUCCEEDED if self.url else UploadState.FAILED
        return self.url
