"""
Deck API endpoints.

Generates decks from the cached card catalog. Every response, success or
failure, is an ApiResponse envelope finalized through the failure boundary.
"""

import logging
import random
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from inkforge.config import DEFAULT_ARCHETYPE
from inkforge.models.deck import GenerationResult
from inkforge.models.failure import (
    ApiResponse,
    FailureKind,
    KnownError,
    create_known_failure,
    create_success,
    create_unknown_failure,
)
from inkforge.services.card_catalog import get_catalog
from inkforge.services.deck_formatter import (
    cost_curve,
    grouped_cards,
    inktable_import_link,
    sort_deck,
)
from inkforge.services.deck_generator import DeckGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decks", tags=["decks"])


class GenerateDeckRequest(BaseModel):
    """Request model for deck generation."""

    inks: list[str] = Field(..., description="One or two ink names")
    archetype: str = DEFAULT_ARCHETYPE
    retry_budget: int | None = Field(default=None, ge=1, le=200)
    seed: int | None = None


class DeckCardResponse(BaseModel):
    """One distinct card of a generated deck."""

    id: str
    title: str
    count: int
    cost: int
    ink: str
    inkwell: bool
    card_types: list[str]
    image_url: str | None = None


class GeneratedDeckResponse(BaseModel):
    """Response model for a generated deck."""

    inks: list[str]
    archetype: str
    total_cards: int
    attempts: int
    cards: list[DeckCardResponse]
    cost_curve: dict[str, dict[str, list[int]]]
    import_link: str


def _deck_response(result: GenerationResult) -> GeneratedDeckResponse:
    deck = sort_deck(result.deck, result.inks)
    return GeneratedDeckResponse(
        inks=list(result.inks),
        archetype=result.archetype,
        total_cards=len(deck),
        attempts=result.attempts,
        cards=[
            DeckCardResponse(
                id=card.id,
                title=card.title,
                count=count,
                cost=card.cost,
                ink=card.ink,
                inkwell=card.inkwell,
                card_types=list(card.card_types),
                image_url=card.image_url,
            )
            for card, count in grouped_cards(deck)
        ],
        cost_curve=cost_curve(deck),
        import_link=inktable_import_link(deck, result.inks),
    )


def _failure(error: KnownError) -> JSONResponse:
    response = create_known_failure(error)
    return JSONResponse(status_code=error.status_code, content=response.model_dump(mode="json"))


@router.post(
    "/generate",
    response_model=ApiResponse[GeneratedDeckResponse],
    responses={
        400: {"model": ApiResponse[Any]},
        404: {"model": ApiResponse[Any]},
        503: {"model": ApiResponse[Any]},
    },
)
async def generate_deck(request: GenerateDeckRequest) -> Any:
    """
    Generate a legal deck for one or two inks.

    Returns a known failure when no card fits the inks, when no card can be
    added, or when the retry budget runs out before the deck is legal.
    """
    try:
        cards = get_catalog()
    except FileNotFoundError as e:
        logger.warning("Card catalog unavailable: %s", e)
        return _failure(
            KnownError(
                kind=FailureKind.SERVICE_UNAVAILABLE,
                message="Card catalog not available. Please try again later.",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        )

    generator = DeckGenerator(
        cards,
        rng=random.Random(request.seed) if request.seed is not None else None,
        retry_budget=request.retry_budget,
    )

    try:
        result = generator.generate_deck(request.inks, archetype=request.archetype)
        result.raise_for_status()
    except KnownError as e:
        logger.info("Deck generation failed: %s (%s)", e.message, e.kind.value)
        return _failure(e)
    except Exception as e:
        logger.exception("Unexpected error generating deck")
        response = create_unknown_failure(e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode="json"),
        )

    return create_success(_deck_response(result))
