"""Routes for creating, reading, editing and deleting blog posts."""
from __future__ import annotations

import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from blog_server.api.deps import get_banner_storage, get_post_store
from blog_server.core.config import Settings, get_settings
from blog_server.domain.posts import (
    BannerRejectedError,
    InvalidArgumentError,
    PersistenceError,
    Post,
    PostError,
    PostNotFoundError,
)
from blog_server.infrastructure.storage import BannerStorage, PostStore
from blog_server.schemas import PostListResponse, PostResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_schema(post: Post, settings: Settings) -> PostResponse:
    response = PostResponse.model_validate(post)
    if post.banner:
        response.banner_url = f"{settings.uploads_url.rstrip('/')}/{post.banner}"
    return response


def _raise_http(exc: PostError) -> NoReturn:
    if isinstance(exc, PostNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found") from exc
    if isinstance(exc, InvalidArgumentError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, BannerRejectedError):
        code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE if exc.unsupported_type else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=str(exc)) from exc
    if isinstance(exc, PersistenceError):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save posts") from exc
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


async def _store_banner(banners: BannerStorage, upload: UploadFile) -> str:
    try:
        return await banners.store_upload(upload)
    except BannerRejectedError as exc:
        _raise_http(exc)
    except OSError as exc:
        logger.error("Failed to store banner upload %s: %s", upload.filename, exc)
        raise HTTPException(status_code=500, detail="Failed to store banner") from exc


def _discard_upload(banners: BannerStorage, name: str) -> None:
    try:
        banners.delete(name)
    except PostError as exc:
        logger.warning("Could not remove orphaned upload %s: %s", name, exc)


@router.get("", response_model=PostListResponse, summary="List all posts")
def list_posts(
    store: PostStore = Depends(get_post_store),
    settings: Settings = Depends(get_settings),
) -> PostListResponse:
    try:
        collection = store.load()
    except PostError as exc:
        _raise_http(exc)
    return PostListResponse(
        total=len(collection.posts),
        last_id=collection.last_id,
        posts=[_to_schema(post, settings) for post in collection.posts],
    )


@router.get("/latest", response_model=PostListResponse, summary="Most recently written posts")
def latest_posts(
    limit: Optional[int] = Query(None, ge=0),
    store: PostStore = Depends(get_post_store),
    settings: Settings = Depends(get_settings),
) -> PostListResponse:
    try:
        posts = store.latest(settings.site.featured_posts if limit is None else limit)
    except PostError as exc:
        _raise_http(exc)
    return PostListResponse(total=len(posts), posts=[_to_schema(post, settings) for post in posts])


@router.get("/{post_id}", response_model=PostResponse, summary="Get one post")
def get_post(
    post_id: str,
    store: PostStore = Depends(get_post_store),
    settings: Settings = Depends(get_settings),
) -> PostResponse:
    try:
        post = store.get(post_id)
    except PostError as exc:
        _raise_http(exc)
    return _to_schema(post, settings)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED, summary="Publish a post")
async def create_post(
    title: str = Form(""),
    description: str = Form(""),
    banner_image: UploadFile = File(...),
    store: PostStore = Depends(get_post_store),
    banners: BannerStorage = Depends(get_banner_storage),
    settings: Settings = Depends(get_settings),
) -> PostResponse:
    if not title.strip():
        await banner_image.close()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="title must not be empty")

    banner = await _store_banner(banners, banner_image)
    try:
        post = await run_in_threadpool(store.create, title, description, banner)
    except PostError as exc:
        _discard_upload(banners, banner)
        _raise_http(exc)
    return _to_schema(post, settings)


@router.put("/{post_id}", response_model=PostResponse, summary="Edit a post")
async def update_post(
    post_id: str,
    title: str = Form(""),
    description: str = Form(""),
    banner_image: Optional[UploadFile] = File(None),
    store: PostStore = Depends(get_post_store),
    banners: BannerStorage = Depends(get_banner_storage),
    settings: Settings = Depends(get_settings),
) -> PostResponse:
    new_banner: Optional[str] = None
    # Browsers send an empty file part when no new banner was picked.
    if banner_image is not None and banner_image.filename:
        new_banner = await _store_banner(banners, banner_image)

    try:
        post = await run_in_threadpool(store.update, post_id, title, description, new_banner)
    except PostError as exc:
        if new_banner:
            _discard_upload(banners, new_banner)
        _raise_http(exc)
    return _to_schema(post, settings)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a post")
def delete_post(post_id: str, store: PostStore = Depends(get_post_store)) -> Response:
    try:
        store.delete(post_id)
    except PostError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
