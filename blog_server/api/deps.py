"""Reusable FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from blog_server.core.config import Settings, get_settings
from blog_server.infrastructure.storage import BannerStorage, PostStore


def _resolve_path(path: Path) -> Path:
    return path if path.is_absolute() else path.resolve()


def build_banner_storage(settings: Settings) -> BannerStorage:
    storage = settings.storage
    return BannerStorage(_resolve_path(storage.uploads_dir), storage.allowed_banner_types)


def build_post_store(settings: Settings, banners: BannerStorage) -> PostStore:
    storage = settings.storage
    return PostStore(
        _resolve_path(storage.posts_file),
        banners,
        strict_load=storage.strict_load,
        delete_replaced_banners=storage.delete_replaced_banners,
    )


@lru_cache()
def get_banner_storage() -> BannerStorage:
    return build_banner_storage(get_settings())


@lru_cache()
def get_post_store() -> PostStore:
    # One store per process; its lock is what serializes writers.
    return build_post_store(get_settings(), get_banner_storage())


__all__ = [
    "build_banner_storage",
    "build_post_store",
    "get_banner_storage",
    "get_post_store",
]
