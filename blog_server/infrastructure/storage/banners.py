"""Filesystem storage for post banner images."""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Iterable

from fastapi import UploadFile

from blog_server.domain.posts.exceptions import (
    AssetCleanupError,
    BannerRejectedError,
    InvalidArgumentError,
)

logger = logging.getLogger(__name__)

UPLOAD_FIELD_NAME = "banner_image"
CHUNK_SIZE = 1024 * 1024

_EXTENSIONS = {
    "image/png": ".png",
    "image/gif": ".gif",
    "image/jpeg": ".jpg",
}


def validate_banner_name(name: str) -> str:
    """Return ``name`` if it is a bare file name inside the uploads directory."""
    if not isinstance(name, str):
        raise InvalidArgumentError("banner reference must be a string")
    if name in {"", ".", ".."} or name != Path(name).name or "\\" in name or "\0" in name:
        raise InvalidArgumentError(f"invalid banner reference: {name!r}")
    return name


class BannerStorage:
    """Stores uploaded banners and removes them by name."""

    def __init__(self, root: Path, allowed_types: Iterable[str]) -> None:
        self._root = root
        self._allowed_types = frozenset(allowed_types)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def allowed_types(self) -> frozenset[str]:
        return self._allowed_types

    def ensure_storage(self) -> None:
        """Create the uploads directory if it does not exist."""
        self._root.mkdir(parents=True, exist_ok=True)

    def resolve(self, name: str) -> Path:
        return self._root / validate_banner_name(name)

    def exists(self, name: str) -> bool:
        path = self.resolve(name)
        return path.exists() and path.is_file()

    def _unique_name(self, content_type: str) -> str:
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{UPLOAD_FIELD_NAME}-{suffix}{_EXTENSIONS.get(content_type, '')}"

    async def store_upload(self, upload: UploadFile) -> str:
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in self._allowed_types:
            await upload.close()
            allowed = ", ".join(sorted(self._allowed_types))
            raise BannerRejectedError(
                f"Invalid file type {content_type or 'unknown'}. Only {allowed} allowed",
                unsupported_type=True,
            )

        self.ensure_storage()
        name = self._unique_name(content_type)
        while (self._root / name).exists():
            name = self._unique_name(content_type)
        target_path = self._root / name
        temp_path = target_path.with_suffix(target_path.suffix + ".upload")

        total_size = 0
        try:
            with temp_path.open("wb") as buffer:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    buffer.write(chunk)
                    total_size += len(chunk)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()

        if total_size == 0:
            temp_path.unlink(missing_ok=True)
            raise BannerRejectedError("Uploaded banner is empty")

        try:
            temp_path.replace(target_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("Stored banner %s (%d bytes)", name, total_size)
        return name

    def delete(self, name: str) -> bool:
        """Remove a banner. Returns False when the file was already gone."""
        path = self.resolve(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise AssetCleanupError(f"failed to delete banner {name}: {exc}") from exc
        logger.info("Deleted banner %s", name)
        return True
