"""Image pipeline: data URLs, storage uploads and the upload state machine."""

import base64
import re

import pytest

from app.services.image_service import (
    ImageUpload,
    ImageValidationError,
    SelectedImage,
    UploadState,
    decode_data_url,
    encode_data_url,
    random_object_key,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def test_encode_data_url_shape():
    data_url = encode_data_url(PNG_BYTES, "image/png")
    assert data_url.startswith("data:image/png;base64,")
    assert base64.b64decode(data_url.split(",", 1)[1]) == PNG_BYTES


def test_decode_data_url_reads_mime_type():
    content, content_type = decode_data_url(encode_data_url(PNG_BYTES, "image/webp"))
    assert content == PNG_BYTES
    assert content_type == "image/webp"


def test_decode_bare_base64_is_treated_as_jpeg():
    content, content_type = decode_data_url(base64.b64encode(b"jpeg").decode())
    assert content == b"jpeg"
    assert content_type == "image/jpeg"


@pytest.mark.parametrize(
    "data",
    [
        "data:image/png,not-base64-flagged",
        "data:image/png;base64,%%%",
        "data:image/png;base64,",
    ],
)
def test_decode_rejects_bad_payloads(data):
    with pytest.raises(ImageValidationError):
        decode_data_url(data)


def test_random_object_key_layout():
    key = random_object_key("factions", "image/gif")
    assert re.fullmatch(r"factions/[0-9a-f]{13}_\d{13}\.gif", key)
    assert random_object_key("factions", "image/gif") != key
    assert random_object_key("wrestlers", "application/octet-stream").endswith(".jpg")


@pytest.mark.asyncio
async def test_ensure_bucket_creates_it_once(images, fake_storage):
    assert await images.ensure_bucket()
    bucket = fake_storage.buckets["wrestler-images"]
    assert bucket["public"] is True
    assert bucket["file_size_limit"] == 1024
    assert bucket["allowed_mime_types"] == [
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/webp",
    ]

    assert await images.ensure_bucket()
    creates = [r for r in fake_storage.requests if r.method == "POST"]
    assert len(creates) == 1


@pytest.mark.asyncio
async def test_upload_returns_public_url(images, fake_storage):
    url = await images.upload_base64(encode_data_url(PNG_BYTES, "image/png"), "promotions")

    (key,) = fake_storage.objects
    assert key.startswith("wrestler-images/promotions/")
    assert key.endswith(".png")
    assert fake_storage.objects[key] == PNG_BYTES
    assert url == f"{images.settings.storage_url}/object/public/{key}"

    upload_request = fake_storage.requests[-1]
    assert upload_request.headers["authorization"] == "Bearer service-key"
    assert upload_request.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_upload_rejects_oversized_and_unsupported_images(images, fake_storage):
    too_big = encode_data_url(b"x" * 2048, "image/png")
    assert await images.upload_base64(too_big, "wrestlers") is None
    assert await images.upload_base64(encode_data_url(b"%PDF", "application/pdf")) is None
    assert fake_storage.objects == {}


@pytest.mark.asyncio
async def test_resolve_for_save_keeps_url_without_new_data(images):
    assert await images.resolve_for_save(None, "https://img/old.png", "wrestlers") == (
        "https://img/old.png"
    )


@pytest.mark.asyncio
async def test_failed_upload_clears_image_and_disables_uploads(images, fake_storage):
    fake_storage.fail_uploads = True
    data = encode_data_url(PNG_BYTES, "image/png")

    assert await images.resolve_for_save(data, "https://img/old.png", "wrestlers") is None
    assert images.capabilities.image_uploads_enabled is False

    # Further saves skip the upload entirely.
    fake_storage.fail_uploads = False
    requests_before = len(fake_storage.requests)
    assert await images.resolve_for_save(data, "https://img/old.png", "wrestlers") == (
        "https://img/old.png"
    )
    assert len(fake_storage.requests) == requests_before


@pytest.mark.asyncio
async def test_upload_state_machine_success(images):
    upload = ImageUpload()
    assert upload.state is UploadState.IDLE

    first = SelectedImage("a.png", "image/png", PNG_BYTES)
    second = SelectedImage("b.png", "image/png", b"other")
    assert upload.select([first, second]) is first
    assert upload.state is UploadState.FILE_SELECTED

    assert upload.encode().startswith("data:image/png;base64,")
    assert upload.state is UploadState.ENCODING

    url = await upload.upload(images, "wrestlers")
    assert url is not None
    assert upload.url == url
    assert upload.state is UploadState.SUCCEEDED


@pytest.mark.asyncio
async def test_upload_state_machine_failure(images, fake_storage):
    fake_storage.fail_uploads = True
    upload = ImageUpload()
    upload.select([SelectedImage("a.png", "image/png", PNG_BYTES)])
    upload.encode()

    assert await upload.upload(images, "wrestlers") is None
    assert upload.state is UploadState.FAILED


def test_upload_state_machine_rejects_out_of_order_steps():
    upload = ImageUpload()
    with pytest.raises(RuntimeError):
        upload.encode()
    with pytest.raises(ValueError):
        upload.select([])
    assert upload.state is UploadState.IDLE
