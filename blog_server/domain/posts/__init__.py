"""Post domain exports."""

from .exceptions import (
    AssetCleanupError,
    BannerRejectedError,
    CorruptCollectionError,
    InvalidArgumentError,
    PersistenceError,
    PostError,
    PostNotFoundError,
)
from .models import Post, PostCollection

__all__ = [
    "AssetCleanupError",
    "BannerRejectedError",
    "CorruptCollectionError",
    "InvalidArgumentError",
    "PersistenceError",
    "Post",
    "PostCollection",
    "PostError",
    "PostNotFoundError",
]
