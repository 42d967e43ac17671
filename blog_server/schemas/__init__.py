"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PostResponse(BaseModel):
    id: int
    title: str
    description: str
    banner: str
    banner_url: Optional[str] = None
    date: datetime

    model_config = ConfigDict(from_attributes=True)


class PostListResponse(BaseModel):
    total: int
    last_id: Optional[int] = Field(default=None, description="Highest id ever assigned")
    posts: list[PostResponse]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
