import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from blog_server import __version__
from blog_server.api import create_api_router
from blog_server.api.deps import build_banner_storage, build_post_store, get_banner_storage, get_post_store
from blog_server.core.config import Settings, get_settings
from blog_server.core.logging import configure_logging
from blog_server.infrastructure.storage import PostStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(app.state.settings)
    store: PostStore = app.state.post_store
    store.banners.ensure_storage()
    store.sweep_stale_writes()
    logger.info("Serving posts from %s, banners from %s", store.path, store.banners.root)
    yield


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PostStore] = None,
) -> FastAPI:
    """Build the application.

    When ``settings`` or ``store`` are given they replace the process-wide
    defaults for routes, the uploads mount and startup alike.
    """
    if store is None:
        store = get_post_store() if settings is None else build_post_store(settings, build_banner_storage(settings))
    settings = settings or get_settings()
    banners = store.banners

    app = FastAPI(
        title=settings.project_name,
        description="Blog post management backend",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.post_store = store

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_post_store] = lambda: store
    app.dependency_overrides[get_banner_storage] = lambda: banners

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount(
        settings.uploads_url,
        StaticFiles(directory=str(banners.root), check_dir=False),
        name="uploads",
    )
    app.include_router(create_api_router(settings.api_prefix))
    return app


app = create_app()
