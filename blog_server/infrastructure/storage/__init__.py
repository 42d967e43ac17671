"""File based storage for posts and their banners."""

from .banners import BannerStorage, validate_banner_name
from .post_store import PostStore, parse_post_id

__all__ = [
    "BannerStorage",
    "PostStore",
    "parse_post_id",
    "validate_banner_name",
]
