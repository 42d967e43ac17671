from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from blog_server.core.config import Settings, StorageSettings
from blog_server.infrastructure.storage import BannerStorage, PostStore
from blog_server.main import create_app

IMAGE_TYPES = ("image/png", "image/gif", "image/jpeg")


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def posts_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "blogs.json"


@pytest.fixture
def banners(uploads_dir: Path) -> BannerStorage:
    return BannerStorage(uploads_dir, IMAGE_TYPES)


@pytest.fixture
def store(posts_file: Path, banners: BannerStorage) -> PostStore:
    return PostStore(posts_file, banners)


@pytest.fixture
def make_banner(uploads_dir: Path):
    def _make(name: str, content: bytes = b"\x89PNG fake") -> str:
        (uploads_dir / name).write_bytes(content)
        return name

    return _make


@pytest.fixture
def settings(posts_file: Path, uploads_dir: Path) -> Settings:
    return Settings(
        environment="test",
        storage=StorageSettings(posts_file=posts_file, uploads_dir=uploads_dir),
    )


@pytest.fixture
def client(settings: Settings, store: PostStore):
    return TestClient(create_app(settings, store))
