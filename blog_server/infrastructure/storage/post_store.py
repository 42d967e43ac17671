"""JSON file backed store for blog posts.

The whole collection lives in one file. Every operation loads it, works on
the in-memory copy and, for mutations, writes it back through a temporary
file that atomically replaces the original. Mutations are serialized by a
per-store lock so concurrent callers never compute the same next id.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Union

from blog_server.domain.posts.exceptions import (
    AssetCleanupError,
    CorruptCollectionError,
    InvalidArgumentError,
    PersistenceError,
    PostNotFoundError,
)
from blog_server.domain.posts.models import Post, PostCollection, utc_now

from .banners import BannerStorage, validate_banner_name

logger = logging.getLogger(__name__)

PostId = Union[int, str]

MAX_ID_DIGITS = 32


def parse_post_id(raw: PostId) -> int:
    """Validate a post id given as an int or as its decimal string form."""
    if isinstance(raw, bool):
        raise InvalidArgumentError(f"invalid post id: {raw!r}")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text or not text.isascii() or not text.isdigit():
            raise InvalidArgumentError(f"invalid post id: {raw!r}")
        # Also keeps int() clear of its max-digits conversion limit.
        if len(text) > MAX_ID_DIGITS:
            raise InvalidArgumentError(f"post id too long ({len(text)} digits)")
        value = int(text)
    else:
        raise InvalidArgumentError(f"invalid post id: {raw!r}")
    if value < 1:
        raise InvalidArgumentError(f"post id must be positive, got {value}")
    return value


class PostStore:
    """Durable CRUD over the posts collection file."""

    def __init__(
        self,
        path: Path,
        banners: BannerStorage,
        *,
        strict_load: bool = False,
        delete_replaced_banners: bool = False,
    ) -> None:
        self._path = path
        self._banners = banners
        self._strict_load = strict_load
        self._delete_replaced_banners = delete_replaced_banners
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def banners(self) -> BannerStorage:
        return self._banners

    # ---------- persistence ----------

    def sweep_stale_writes(self) -> List[Path]:
        """Remove temporary files left behind by saves that never completed."""
        removed: List[Path] = []
        with self._lock:
            if not self._path.parent.is_dir():
                return removed
            for candidate in self._path.parent.glob(f".{self._path.name}.*.tmp"):
                try:
                    candidate.unlink()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    logger.warning("Could not remove stale temporary file %s: %s", candidate, exc)
                    continue
                removed.append(candidate)
        if removed:
            logger.warning("Removed %d unfinished write(s) next to %s", len(removed), self._path)
        return removed

    def _fallback(self, reason: str, exc: Exception) -> PostCollection:
        if self._strict_load:
            if isinstance(exc, PersistenceError):
                raise exc
            raise PersistenceError(f"{reason}: {self._path}") from exc
        logger.warning("%s %s, starting from an empty collection: %s", reason, self._path, exc)
        return PostCollection.empty()

    def load(self) -> PostCollection:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Posts file %s does not exist yet", self._path)
            return PostCollection.empty()
        except (OSError, UnicodeDecodeError) as exc:
            return self._fallback("Cannot read posts file", exc)

        try:
            collection = PostCollection.from_mapping(json.loads(raw))
        except json.JSONDecodeError as exc:
            return self._fallback("Posts file is not valid JSON", exc)
        except CorruptCollectionError as exc:
            return self._fallback("Posts file is corrupt", exc)

        highest = collection.max_id
        if collection.last_id < highest:
            logger.warning(
                "Posts file %s has lastId %d below highest post id %d, raising it",
                self._path,
                collection.last_id,
                highest,
            )
            collection.last_id = highest
        return collection

    def save(self, collection: PostCollection) -> None:
        payload = json.dumps(collection.to_mapping(), indent=2, ensure_ascii=False)
        tmp_path: Optional[Path] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(payload)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            tmp_path.replace(self._path)
        except OSError as exc:
            logger.error("Failed to write posts file %s: %s", self._path, exc)
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"failed to write posts file {self._path}") from exc

    # ---------- reads ----------

    def list_posts(self) -> List[Post]:
        return self.load().posts

    def latest(self, limit: int) -> List[Post]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidArgumentError(f"limit must be a non-negative integer, got {limit!r}")
        posts = sorted(self.load().posts, key=lambda post: (post.date, post.id), reverse=True)
        return posts[:limit]

    def get(self, post_id: PostId) -> Post:
        parsed = parse_post_id(post_id)
        post = self.load().find(parsed)
        if post is None:
            raise PostNotFoundError(parsed)
        return post

    # ---------- mutations ----------

    def create(self, title: str, description: str = "", banner: Optional[str] = "") -> Post:
        if not isinstance(title, str) or not title.strip():
            raise InvalidArgumentError("title must not be empty")
        banner = validate_banner_name(banner) if banner else ""

        with self._lock:
            collection = self.load()
            post = Post(
                id=collection.next_id(),
                title=title,
                description=description or "",
                banner=banner,
                date=utc_now(),
            )
            collection.posts.append(post)
            collection.last_id = post.id
            self.save(collection)

        logger.info("Created post %d %r", post.id, post.title)
        return post

    def update(
        self,
        post_id: PostId,
        title: str,
        description: str,
        banner: Optional[str] = None,
    ) -> Post:
        parsed = parse_post_id(post_id)
        new_banner = validate_banner_name(banner) if banner else None

        with self._lock:
            collection = self.load()
            post = collection.find(parsed)
            if post is None:
                raise PostNotFoundError(parsed)
            previous_banner = post.banner
            post.title = title or ""
            post.description = description or ""
            if new_banner is not None:
                post.banner = new_banner
            post.date = post.touched()
            self.save(collection)

        logger.info("Updated post %d", post.id)
        if (
            self._delete_replaced_banners
            and new_banner is not None
            and previous_banner
            and previous_banner != new_banner
        ):
            self._discard_banner(previous_banner, post.id)
        return post

    def delete(self, post_id: PostId) -> Post:
        parsed = parse_post_id(post_id)

        with self._lock:
            collection = self.load()
            index = collection.index_of(parsed)
            if index == -1:
                raise PostNotFoundError(parsed)
            post = collection.posts.pop(index)
            self.save(collection)

        logger.info("Deleted post %d", post.id)
        if post.banner:
            self._discard_banner(post.banner, post.id)
        return post

    def _discard_banner(self, name: str, post_id: int) -> None:
        try:
            removed = self._banners.delete(name)
        except (AssetCleanupError, InvalidArgumentError) as exc:
            logger.warning("Could not remove banner %s of post %d: %s", name, post_id, exc)
            return
        if not removed:
            logger.warning("Banner %s of post %d was already missing", name, post_id)
