"""
TerpTaster Backend - Photo Service Unit Tests
=============================================

What:  Image validation, resizing, WebP re-encoding, storage and lookup.
How:   Real Pillow images encoded in memory; storage under pytest's tmp_path.
"""

import io
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from terptaster.exceptions import FileStorageError, NotFoundError, ValidationError
from terptaster.services.photo_service import PhotoService


def decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestProcessImage:

    def test_large_image_fits_box_keeping_aspect(self, photo_service, sample_image_bytes):
        image = decode(photo_service.process_image(sample_image_bytes))
        assert image.format == "WEBP"
        assert image.size == (800, 600)

    def test_tall_image_limited_by_height(self, photo_service, image_factory):
        image = decode(photo_service.process_image(image_factory(size=(600, 1200))))
        assert image.size == (300, 600)

    def test_small_image_not_enlarged(self, photo_service, image_factory):
        image = decode(photo_service.process_image(image_factory(size=(320, 240), fmt="JPEG")))
        assert image.size == (320, 240)
        assert image.format == "WEBP"

    def test_palette_and_grayscale_images_converted(self, photo_service, image_factory):
        for mode in ("P", "L"):
            image = decode(photo_service.process_image(image_factory(size=(50, 50), mode=mode)))
            assert image.format == "WEBP"

    def test_non_image_rejected(self, photo_service):
        with pytest.raises(ValidationError, match="Only image files are allowed"):
            photo_service.process_image(b"%PDF-1.4 definitely not a picture")


class TestLimits:

    def test_no_files(self, photo_service):
        with pytest.raises(ValidationError, match="No files uploaded"):
            photo_service.validate_count(0)

    def test_too_many_files(self, temp_storage):
        service = PhotoService(storage_root=temp_storage, max_files=2)
        with pytest.raises(ValidationError) as exc_info:
            service.validate_count(3)
        assert exc_info.value.context == {"max_files": 2, "received": 3, "field": "photos"}

    def test_oversized_file(self, temp_storage):
        service = PhotoService(storage_root=temp_storage, max_size=1024 * 1024)
        with pytest.raises(ValidationError, match="exceeds the maximum size of 1MB"):
            service.validate_size("huge.jpg", 1024 * 1024 + 1)

    def test_size_at_limit_accepted(self, temp_storage):
        service = PhotoService(storage_root=temp_storage, max_size=1000)
        service.validate_size("ok.jpg", 1000)


class TestStorage:

    @pytest.mark.asyncio
    async def test_save_upload_writes_webp(self, photo_service, sample_image_bytes, temp_storage):
        photo = await photo_service.save_upload("bud.png", sample_image_bytes)

        assert photo.filename.endswith(".webp")
        assert photo.original_name == "bud.png"
        assert photo.url == f"/uploads/{photo.filename}"
        assert photo.size == len(sample_image_bytes)
        stored = Path(temp_storage) / photo.filename
        assert decode(stored.read_bytes()).format == "WEBP"

    @pytest.mark.asyncio
    async def test_filenames_are_unique(self, photo_service, image_factory):
        content = image_factory(size=(10, 10))
        first = await photo_service.save_upload("a.png", content)
        second = await photo_service.save_upload("a.png", content)
        assert first.filename != second.filename

    @pytest.mark.asyncio
    async def test_batch_is_all_or_nothing(self, photo_service, sample_image_bytes, temp_storage):
        with pytest.raises(ValidationError):
            await photo_service.save_uploads(
                [("good.png", sample_image_bytes), ("bad.txt", b"plain text")]
            )
        assert list(Path(temp_storage).iterdir()) == []

    @pytest.mark.asyncio
    async def test_batch_size_checked_before_processing(self, temp_storage, sample_image_bytes):
        service = PhotoService(storage_root=temp_storage, max_size=100)
        with patch.object(service, "process_image") as process:
            with pytest.raises(ValidationError):
                await service.save_uploads([("big.png", sample_image_bytes)])
        process.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_failure_becomes_storage_error(self, photo_service, image_factory):
        with patch("terptaster.services.photo_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError, match="Failed to upload photos"):
                await photo_service.save_upload("a.png", image_factory(size=(10, 10)))

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_quiet(self, photo_service):
        await photo_service.cleanup_file("never-existed.webp")


class TestResolve:

    @pytest.mark.asyncio
    async def test_existing_photo(self, photo_service, image_factory):
        photo = await photo_service.save_upload("a.png", image_factory(size=(10, 10)))
        assert photo_service.resolve(photo.filename).name == photo.filename

    def test_missing_photo(self, photo_service):
        with pytest.raises(NotFoundError):
            photo_service.resolve("0000.webp")

    @pytest.mark.parametrize("name", ["../secrets.txt", "../../etc/passwd", ".", ""])
    def test_traversal_rejected(self, photo_service, name):
        with pytest.raises(ValidationError, match="Invalid file path"):
            photo_service.resolve(name)


def fake_upload(content: bytes, declared_size=None, filename="bud.png") -> MagicMock:
    upload = MagicMock()
    upload.filename = filename
    upload.size = declared_size
    upload.read = AsyncMock(side_effect=lambda size=-1: content if size < 0 else content[:size])
    return upload


class TestReadUpload:

    def setup_method(self):
        self.max_size = 1000

    def service(self, temp_storage):
        return PhotoService(storage_root=temp_storage, max_size=self.max_size)

    @pytest.mark.asyncio
    async def test_declared_size_rejected_before_reading(self, temp_storage):
        upload = fake_upload(b"x" * 5000, declared_size=5000)
        with pytest.raises(ValidationError, match="exceeds the maximum size"):
            await self.service(temp_storage).read_upload(upload)
        upload.read.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_capped_when_size_unknown(self, temp_storage):
        upload = fake_upload(b"x" * 5000, declared_size=None)
        with pytest.raises(ValidationError):
            await self.service(temp_storage).read_upload(upload)
        upload.read.assert_awaited_once_with(self.max_size + 1)

    @pytest.mark.asyncio
    async def test_understated_size_still_caught(self, temp_storage):
        upload = fake_upload(b"x" * 5000, declared_size=10)
        with pytest.raises(ValidationError):
            await self.service(temp_storage).read_upload(upload)

    @pytest.mark.asyncio
    async def test_small_upload_returned(self, temp_storage):
        upload = fake_upload(b"x" * 1000, declared_size=1000, filename=None)
        name, content = await self.service(temp_storage).read_upload(upload)
        assert name == "photo"
        assert len(content) == 1000
