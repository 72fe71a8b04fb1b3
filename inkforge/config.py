from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "InkForge"
    debug: bool = False

    catalog_path: Path = DATA_DIR / "cards.json"

    lorcast_api_url: str = "https://api.lorcast.com/v0"

    # Repair rounds allowed before generation gives up
    retry_budget: int = 50

    deck_size: int = 60

    # Fixed seed makes generation reproducible (None = system randomness)
    random_seed: int | None = None


settings = Settings()


# =============================================================================
# COST CURVES
# =============================================================================

# Target card count per cost bucket (bucket 5 = cost 5 and up).
# Each curve sums to a full deck.
ARCHETYPE_CURVES: dict[str, dict[int, int]] = {
    "default": {1: 8, 2: 12, 3: 20, 4: 12, 5: 8},
    "aggro": {1: 12, 2: 20, 3: 12, 4: 8, 5: 8},
}

DEFAULT_ARCHETYPE = "default"

# Probability of adding 1, 2, 3 or 4 copies of a picked card in one step
COPY_COUNT_LADDER: dict[int, float] = {1: 0.4, 2: 0.3, 3: 0.2, 4: 0.1}
