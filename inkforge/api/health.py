"""
Health check endpoint.

Reports liveness and whether the card catalog is loaded.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from inkforge.services.card_catalog import get_catalog

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    cards: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Always healthy while the service runs. `cards` is the catalog size, or
    None when the catalog file has not been downloaded yet.
    """
    try:
        cards = len(get_catalog())
    except FileNotFoundError:
        cards = None
    return HealthResponse(status="healthy", cards=cards)
