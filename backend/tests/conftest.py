"""
TerpTaster Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment variables are set before anything from `terptaster` is
       imported, so the settings singleton never points at a real database
       or the real upload directory.

Fixture Hierarchy (all function-scoped):
    ├── small_dataset:       Myrcene / Limonene / Pinene reference data
    ├── mock_db_session:     AsyncMock standing in for AsyncSession
    ├── temp_storage:        temporary photo directory
    ├── photo_service:       PhotoService rooted at temp_storage
    ├── image_factory:       encodes solid test images
    ├── sample_image_bytes:  a real 1200x900 PNG
    ├── make_review:         factory for Review ORM objects
    └── test_client:         HTTPX AsyncClient with dataset/photo overrides
"""

import io
import os
import tempfile
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

# Must run before any terptaster import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="terptaster_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from terptaster.models.review import Review
from terptaster.schemas.terpene import Terpene
from terptaster.services.photo_service import PhotoService
from terptaster.services.terpene_dataset import TerpeneDataset


@pytest.fixture
def small_dataset():
    """
    Three terpenes; "Woody" is shared by Pinene only, "Citrus" by Limonene only.

        Myrcene   Earthy, Musky
        Limonene  Citrus, Lemon
        Pinene    Pine, Woody
    """
    return TerpeneDataset(
        [
            Terpene(
                name="Myrcene",
                possible_flavors=("Earthy", "Musky"),
                effects="Relaxing, sedating",
                fun_fact="Also found in mangoes.",
                notable_strains=("Blue Dream", "OG Kush"),
            ),
            Terpene(
                name="Limonene",
                possible_flavors=("Citrus", "Lemon"),
                effects="Uplifting",
                fun_fact="Found in citrus peels.",
                notable_strains=("Super Lemon Haze",),
            ),
            Terpene(
                name="Pinene",
                possible_flavors=("Pine", "Woody"),
                effects="Alertness",
                fun_fact="Most common terpene in nature.",
                notable_strains=("Jack Herer",),
            ),
        ]
    )


@pytest.fixture
def mock_db_session():
    """AsyncSession stand-in: async execute/flush/delete, sync add."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def photo_service(temp_storage):
    return PhotoService(storage_root=temp_storage)


def _image_bytes(size=(1200, 900), fmt="PNG", mode="RGB"):
    buffer = io.BytesIO()
    Image.new(mode, size, color="green" if mode == "RGB" else 0).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    """Encode a solid image: image_factory(size=(w, h), fmt="PNG", mode="RGB")."""
    return _image_bytes


@pytest.fixture
def sample_image_bytes():
    """A real PNG larger than the 800x600 storage box."""
    return _image_bytes()


@pytest.fixture
def make_review():
    """Build a detached Review with sensible defaults; override any column."""

    def _make(**overrides):
        values = {
            "id": 1,
            "strain": "Blue Dream",
            "location": "Denver",
            "reviewed_by": "sam",
            "overall_score": 8.5,
            "review_date": date(2026, 1, 15),
            "known_terps": ["Myrcene", "Limonene"],
            "inhale_terps": ["Earthy"],
            "exhale_terps": ["Citrus"],
            "photos": [],
            "created_at": datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
        }
        values.update(overrides)
        return Review(**values)

    return _make


@pytest_asyncio.fixture
async def test_client(small_dataset, photo_service):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan, so the dataset and photo
    service are injected with dependency overrides.
    """
    from terptaster.main import app
    from terptaster.services.photo_service import get_photo_service
    from terptaster.services.terpene_dataset import get_terpene_dataset

    app.dependency_overrides[get_terpene_dataset] = lambda: small_dataset
    app.dependency_overrides[get_photo_service] = lambda: photo_service
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
