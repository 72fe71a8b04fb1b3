"""
Card catalog service.

Downloads raw card records from the Lorcast API, stores them as a JSON file
and loads them back as analyzed Card values. Generation only ever sees the
loaded, analyzed catalog; it never touches the network or the file system.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx

from inkforge.config import settings
from inkforge.models.card import Card
from inkforge.models.failure import FailureKind, KnownError
from inkforge.parsers.lorcast import parse_cards
from inkforge.services.requirement_analyzer import analyze_catalog

logger = logging.getLogger(__name__)

# The search API is queried once per printed cost
CATALOG_COSTS = range(0, 11)


class CatalogFetchError(KnownError):
    """Raised when downloading the card catalog fails."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            suggestion="Check the Lorcast API status and retry the download.",
            status_code=502,
        )


async def fetch_catalog_records(
    client: httpx.AsyncClient | None = None,
    base_url: str | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch every card record from the Lorcast search API.

    Args:
        client: HTTP client to use (a short-lived one is created if None)
        base_url: API root, defaults to settings.lorcast_api_url

    Returns:
        Raw card records, cheapest cost first

    Raises:
        CatalogFetchError: If any request fails
    """
    base_url = base_url or settings.lorcast_api_url
    if client is None:
        async with httpx.AsyncClient(timeout=30.0) as own_client:
            return await fetch_catalog_records(own_client, base_url)

    records: list[dict[str, Any]] = []
    try:
        for cost in CATALOG_COSTS:
            response = await client.get(f"{base_url}/cards/search", params={"q": f"cost:{cost}"})
            response.raise_for_status()
            results = response.json().get("results", [])
            logger.debug("Fetched %d cards of cost %d", len(results), cost)
            records.extend(results)
    except httpx.HTTPStatusError as e:
        raise CatalogFetchError(
            f"Lorcast API returned {e.response.status_code} for {e.request.url}"
        ) from e
    except httpx.RequestError as e:
        raise CatalogFetchError(f"Could not reach Lorcast API: {e}") from e

    return records


async def download_catalog(output_path: Path | None = None) -> Path:
    """
    Download the card catalog to a JSON file.

    Args:
        output_path: Where to save the file. Defaults to settings.catalog_path

    Returns:
        Path to the written file
    """
    if output_path is None:
        output_path = settings.catalog_path

    records = await fetch_catalog_records()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(records, f)

    logger.info("Saved %d card records to %s", len(records), output_path)
    return output_path


def load_catalog(path: Path | None = None) -> list[Card]:
    """
    Load and analyze the card catalog from file.

    Args:
        path: Path to the JSON file of raw records

    Returns:
        Analyzed cards, ready for deck generation

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
    """
    if path is None:
        path = settings.catalog_path

    if not path.exists():
        raise FileNotFoundError(
            f"Card catalog not found at {path}. "
            "Run `python -m inkforge.jobs.download_cards` first."
        )

    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    return analyze_catalog(parse_cards(records))


@lru_cache(maxsize=1)
def get_catalog() -> tuple[Card, ...]:
    """
    Get the cached, analyzed card catalog.

    Analysis completes before the catalog is returned, so every caller
    shares the same read-only cards.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
    """
    return tuple(load_catalog())
