"""Post domain specific exceptions."""


class PostError(Exception):
    """Base class for post domain errors."""


class PostNotFoundError(PostError):
    """Raised when no post has the requested id."""

    def __init__(self, post_id: int) -> None:
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class InvalidArgumentError(PostError, ValueError):
    """Raised for malformed ids, empty titles and unusable banner references."""


class PersistenceError(PostError):
    """Raised when the posts file cannot be written (or read in strict mode)."""


class AssetCleanupError(PostError):
    """Raised when a banner file exists but cannot be removed."""


class BannerRejectedError(PostError):
    """Raised when an uploaded banner is empty or has a disallowed content type."""

    def __init__(self, message: str, *, unsupported_type: bool = False) -> None:
        super().__init__(message)
        self.unsupported_type = unsupported_type


class CorruptCollectionError(PersistenceError):
    """Raised when the posts file content does not describe a valid collection."""
