"""Domain models for blog posts and the persisted collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .exceptions import CorruptCollectionError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise CorruptCollectionError(f"invalid post date: {value!r}")
    # Older files carry JavaScript style timestamps ending in "Z".
    raw = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise CorruptCollectionError(f"invalid post date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key)
    # bool is an int subclass; a stored true/false is never a valid id.
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorruptCollectionError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _optional_str(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CorruptCollectionError(f"field {key!r} must be a string, got {value!r}")
    return value


@dataclass(slots=True)
class Post:
    id: int
    title: str
    description: str
    banner: str
    date: datetime

    @classmethod
    def from_mapping(cls, payload: Any) -> "Post":
        if not isinstance(payload, dict):
            raise CorruptCollectionError("post entries must be objects")
        post_id = _require_int(payload, "id")
        if post_id < 1:
            raise CorruptCollectionError(f"post id must be positive, got {post_id}")
        title = payload.get("title")
        if not isinstance(title, str):
            raise CorruptCollectionError(f"post {post_id} has no title")
        return cls(
            id=post_id,
            title=title,
            description=_optional_str(payload, "description"),
            banner=_optional_str(payload, "banner"),
            date=parse_timestamp(payload.get("date")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "banner": self.banner,
            "date": format_timestamp(self.date),
        }

    def touched(self, now: Optional[datetime] = None) -> datetime:
        """Return a modification time strictly later than the current one."""
        now = now or utc_now()
        if now <= self.date:
            now = self.date + timedelta(microseconds=1)
        return now


@dataclass(slots=True)
class PostCollection:
    last_id: int = 0
    posts: List[Post] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "PostCollection":
        return cls()

    @classmethod
    def from_mapping(cls, payload: Any) -> "PostCollection":
        if not isinstance(payload, dict):
            raise CorruptCollectionError("collection must be a JSON object")
        last_id = _require_int(payload, "lastId")
        if last_id < 0:
            raise CorruptCollectionError(f"lastId must not be negative, got {last_id}")

        # Files written by the first version of the site keep posts under "blogs".
        entries = payload.get("posts", payload.get("blogs", []))
        if not isinstance(entries, list):
            raise CorruptCollectionError("posts must be a list")

        posts = [Post.from_mapping(entry) for entry in entries]
        seen: set[int] = set()
        for post in posts:
            if post.id in seen:
                raise CorruptCollectionError(f"duplicate post id {post.id}")
            seen.add(post.id)
        return cls(last_id=last_id, posts=posts)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "lastId": self.last_id,
            "posts": [post.to_mapping() for post in self.posts],
        }

    @property
    def max_id(self) -> int:
        return max((post.id for post in self.posts), default=0)

    def index_of(self, post_id: int) -> int:
        for index, post in enumerate(self.posts):
            if post.id == post_id:
                return index
        return -1

    def find(self, post_id: int) -> Optional[Post]:
        index = self.index_of(post_id)
        return self.posts[index] if index != -1 else None

    def next_id(self) -> int:
        return self.last_id + 1
