"""
Pytest configuration and fixtures for AlbumDrop tests
"""

import os
import tempfile

# Test-friendly environment prior to importing the app; the app mounts its
# albums directory at import time.
os.environ.setdefault("APP_ENV", "test")
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="albumdrop-test-")
os.environ.setdefault("METRICS_ENABLED", "1")
os.environ.pop("PUBLIC_BASE_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.rate_limit import limiter  # noqa: E402
from app.schemas.album import UploadedPhoto  # noqa: E402
from app.services.storage import storage  # noqa: E402



def make_photo(name: str = "IMG_0001.jpg", content_type: str = "image/jpeg", data: bytes = None) -> UploadedPhoto:
    if data is None:
        data = b"\xff\xd8\xff\xe0fake-jpeg-" + name.encode()
    return UploadedPhoto.from_bytes(name, content_type, data)


@pytest.fixture
def albums_root(tmp_path, monkeypatch):
    """Point the storage singleton at an empty per-test directory."""
    root = tmp_path / "albums"
    root.mkdir()
    monkeypatch.setattr(storage, "root", root)
    return root


@pytest.fixture(scope="session")
def client():
    from app.main import app
    limiter.enabled = False
    with TestClient(app) as c:
        yield c


@pytest.fixture(name="make_photo")
def make_photo_fixture():
    return make_photo
