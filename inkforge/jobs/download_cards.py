"""
Download the Lorcast card catalog.

Run this job before starting the API or generating decks:

    python -m inkforge.jobs.download_cards
"""

import asyncio
import logging

from inkforge.services.card_catalog import download_catalog

logger = logging.getLogger(__name__)


async def run_download() -> None:
    """Download the card catalog."""
    logger.info("Downloading Lorcast card catalog...")

    try:
        path = await download_catalog()
        logger.info("Downloaded card catalog to %s", path)
    except Exception as e:
        logger.error("Failed to download card catalog: %s", e)
        raise


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
