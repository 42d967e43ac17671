"""Logging setup shared by the server entry points."""

from __future__ import annotations

import logging

from blog_server.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.logging.level.upper()
    logging.basicConfig(level=level, format=settings.logging.format)
    logging.getLogger("blog_server").setLevel(level)
