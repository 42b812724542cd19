"""
TerpTaster Backend - Photo Upload Routes
========================================

What:  POST /api/upload (multipart field `photos`) and GET /uploads/{filename}.
How:   Upload bytes are handed to PhotoService, which validates, shrinks and
       re-encodes them as WebP. Stored photos are served with a 24h cache.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from terptaster.schemas.common import ErrorResponse
from terptaster.schemas.review import UploadResponse
from terptaster.services.photo_service import PhotoService, get_photo_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post(
    "/api/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "No files, too many, too large, or not an image", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Upload review photos",
)
async def upload_photos(
    photos: Optional[List[UploadFile]] = File(default=None),
    service: PhotoService = Depends(get_photo_service),
) -> UploadResponse:
    photos = photos or []
    service.validate_count(len(photos))
    uploads = [await service.read_upload(photo) for photo in photos]
    saved = await service.save_uploads(uploads)
    logger.info("Uploaded %d photo(s)", len(saved))
    return UploadResponse(files=saved)


@router.get(
    "/uploads/{filename}",
    responses={
        200: {"description": "WebP image", "content": {"image/webp": {}}},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Serve a stored photo",
)
async def serve_photo(
    filename: str,
    service: PhotoService = Depends(get_photo_service),
) -> FileResponse:
    path = service.resolve(filename)
    return FileResponse(
        path=str(path),
        media_type="image/webp",
        headers={"Cache-Control": "public, max-age=86400"},
    )
