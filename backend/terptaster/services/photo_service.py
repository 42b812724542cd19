"""
TerpTaster Backend - Photo Storage Service
==========================================

What:  Validates, shrinks, re-encodes and stores review photos; resolves
       stored photos for download.
How:   Pillow decodes the upload (anything that does not decode is not an
       image), shrinks it to fit the configured box without enlarging, and
       re-encodes it as WebP. The result is written with aiofiles under a
       UUID filename.
Who:   POST /api/upload and GET /uploads/{filename}.

Security Model:
    1. Count and declared size are checked before reading; reads are capped
       at max_size + 1 bytes
    2. Content check: the bytes must decode as an image, whatever the
       filename or Content-Type claims
    3. Re-encoding: only Pillow's WebP output is ever written to disk
    4. UUID filename: no user input reaches the file system path
    5. Path traversal: `resolve()` refuses names that leave the storage root

Storage Layout:
    uploads/
    ├── 0b8a6c0e-....webp
    └── 5f1d2e44-....webp
"""

import io
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import aiofiles
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from PIL import Image, UnidentifiedImageError

from terptaster.config import settings
from terptaster.exceptions import FileStorageError, NotFoundError, ValidationError
from terptaster.schemas.review import UploadedPhoto

logger = logging.getLogger(__name__)

STORED_EXTENSION = ".webp"
NOT_AN_IMAGE_MESSAGE = "Only image files are allowed"


class PhotoService:
    """
    Photo upload pipeline and storage lookups.

    Args:
        storage_root:  Override settings.storage_root (tests use a tmp dir).
        max_width / max_height / quality / max_size / max_files:
                       Override the matching settings.
    """

    def __init__(
        self,
        storage_root: Optional[str] = None,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        quality: Optional[int] = None,
        max_size: Optional[int] = None,
        max_files: Optional[int] = None,
    ):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_width = max_width or settings.image_max_width
        self.max_height = max_height or settings.image_max_height
        self.quality = quality or settings.image_quality
        self.max_size = max_size or settings.max_upload_size
        self.max_files = max_files or settings.max_upload_files

    def ensure_storage(self) -> None:
        self.storage_root.mkdir(parents=True, exist_ok=True)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_count(self, count: int) -> None:
        if count == 0:
            raise ValidationError(message="No files uploaded", field="photos")
        if count > self.max_files:
            raise ValidationError(
                message=f"Too many files. Upload at most {self.max_files} photos at a time.",
                field="photos",
                context={"max_files": self.max_files, "received": count},
            )

    def validate_size(self, filename: str, size: int) -> None:
        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"File '{filename}' exceeds the maximum size of {max_mb:.0f}MB.",
                field="photos",
                context={"filename": filename, "max_size": self.max_size, "actual_size": size},
            )

    async def read_upload(self, upload: UploadFile) -> Tuple[str, bytes]:
        """
        Read one multipart upload without holding more than max_size + 1 bytes.

        The declared size is checked before reading; the read itself is capped
        so a missing or understated size still cannot exhaust memory.
        """
        name = upload.filename or "photo"
        if upload.size is not None:
            self.validate_size(name, upload.size)
        content = await upload.read(self.max_size + 1)
        self.validate_size(name, len(content))
        return name, content

    # ── Image Processing ──────────────────────────────────────────────────

    def process_image(self, content: bytes) -> bytes:
        """
        Decode, shrink to fit inside the box and encode as WebP.

        Aspect ratio is kept; images already inside the box keep their size.

        Raises:
            ValidationError: content is not a decodable image
        """
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise ValidationError(
                message=NOT_AN_IMAGE_MESSAGE,
                field="photos",
                context={"reason": type(e).__name__},
            ) from e

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")

        # thumbnail() only ever shrinks
        image.thumbnail((self.max_width, self.max_height))

        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=self.quality)
        return buffer.getvalue()

    # ── Storage ───────────────────────────────────────────────────────────

    async def store(self, data: bytes) -> str:
        """Write processed bytes under a new UUID name; returns the filename."""
        filename = f"{uuid.uuid4()}{STORED_EXTENSION}"
        path = self.storage_root / filename
        try:
            self.ensure_storage()
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to upload photos",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("Photo stored: %s (%d bytes)", filename, len(data))
        return filename

    async def save_upload(self, original_name: str, content: bytes) -> UploadedPhoto:
        self.validate_size(original_name, len(content))
        processed = await run_in_threadpool(self.process_image, content)
        filename = await self.store(processed)
        return UploadedPhoto(
            filename=filename,
            original_name=original_name,
            url=f"/uploads/{filename}",
            size=len(content),
        )

    async def save_uploads(self, uploads: Sequence[Tuple[str, bytes]]) -> List[UploadedPhoto]:
        """
        Validate and store a batch of (original_name, content) uploads.

        All or nothing: if any photo fails, photos already stored by this call
        are removed before the error propagates.
        """
        self.validate_count(len(uploads))
        for name, content in uploads:
            self.validate_size(name, len(content))

        saved: List[UploadedPhoto] = []
        try:
            for name, content in uploads:
                saved.append(await self.save_upload(name, content))
        except Exception:
            for photo in saved:
                await self.cleanup_file(photo.filename)
            raise
        return saved

    def resolve(self, filename: str) -> Path:
        """
        Absolute path of a stored photo.

        Raises:
            ValidationError: name escapes the storage root
            NotFoundError:   no such photo
        """
        path = (self.storage_root / filename).resolve()
        if not path.is_relative_to(self.storage_root) or path == self.storage_root:
            raise ValidationError(message="Invalid file path", field="filename")
        if not path.is_file():
            raise NotFoundError(resource="photo", resource_id=filename)
        return path

    async def cleanup_file(self, filename: str) -> None:
        """Best-effort removal of a stored photo."""
        path = self.storage_root / filename
        try:
            path.unlink(missing_ok=True)
            logger.info("Cleaned up photo: %s", filename)
        except OSError as e:
            logger.warning("Failed to clean up photo %s: %s", filename, str(e))


def get_photo_service() -> PhotoService:
    """FastAPI dependency: a photo service over the configured storage root."""
    return PhotoService()
