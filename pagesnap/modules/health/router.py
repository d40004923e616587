"""Health check routes."""

from fastapi import APIRouter

from pagesnap import __version__

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check. Does not start a browser."""
    return {"status": "ok", "service": "pagesnap", "version": __version__}
