"""Liveness endpoint."""

from fastapi import APIRouter

from blog_server import __version__
from blog_server.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health() -> HealthResponse:
    return HealthResponse(version=__version__)
