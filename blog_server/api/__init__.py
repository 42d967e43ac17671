from fastapi import APIRouter

from blog_server.api.routers import health, posts


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(health.router, tags=["health"])
    router.include_router(posts.router, prefix="/posts", tags=["posts"])
    return router


__all__ = [
    "create_api_router",
]
