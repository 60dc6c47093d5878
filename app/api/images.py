"""
Image API Routes - privileged image upload.

The browser posts the picked or dropped files; only the first one is read.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.dependencies import get_image_pipeline
from app.schemas import ImageUploadResponse
from app.services.image_service import (
    DEFAULT_MIME_TYPE,
    ImagePipeline,
    ImageUpload,
    SelectedImage,
)
from app.utils.logger import setup_logger

logger = setup_logger("api.images")

router = APIRouter(prefix="/api/images", tags=["Images"])

IMAGE_FOLDERS = ("wrestlers", "promotions", "factions")


@router.post("/{folder}", response_model=ImageUploadResponse)
async def upload_image(
    folder: str,
    files: list[UploadFile] = File(...),
    images: ImagePipeline = Depends(get_image_pipeline),
):
    if folder not in IMAGE_FOLDERS:
        raise HTTPException(status_code=404, detail=f"Unknown image folder '{folder}'")
    if not images.uploads_enabled:
        raise HTTPException(
            status_code=503, detail="Image uploads are disabled for this session"
        )

    # Only the first file is used; reading stops one byte past the size limit.
    file = files[0]
    max_size = images.settings.storage_max_file_size
    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise HTTPException(
            status_code=413, detail=f"Image exceeds the {max_size} byte limit"
        )

    upload = ImageUpload()
    selected = upload.select(
        [
            SelectedImage(
                filename=file.filename,
                content_type=file.content_type or DEFAULT_MIME_TYPE,
                content=content,
            )
        ]
    )
    upload.encode()
    url = await upload.upload(images, folder)
    if url is None:
        images.capabilities.disable_image_uploads()
        raise HTTPException(status_code=502, detail="Failed to upload image")
    return ImageUploadResponse(url=url, filename=selected.filename)
