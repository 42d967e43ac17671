"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5500
    reload: bool = False


class StorageSettings(BaseModel):
    posts_file: Path = Field(default=Path("data/blogs.json"))
    uploads_dir: Path = Field(default=Path("public/uploads"))
    allowed_banner_types: tuple[str, ...] = ("image/png", "image/gif", "image/jpeg")
    # Raise instead of starting from an empty collection when the posts file is unreadable.
    strict_load: bool = False
    delete_replaced_banners: bool = False


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class SiteSettings(BaseModel):
    featured_posts: int = Field(default=4, ge=0)


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Blog Server"
    api_prefix: str = "/api"
    uploads_url: str = "/uploads"

    server: ServerSettings = ServerSettings()
    storage: StorageSettings = StorageSettings()
    logging: LoggingSettings = LoggingSettings()
    site: SiteSettings = SiteSettings()

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def posts_file(self) -> Path:
        return self.storage.posts_file

    @property
    def uploads_dir(self) -> Path:
        return self.storage.uploads_dir


@lru_cache()
def get_settings() -> Settings:
    return Settings()
