"""
InkForge services.

Catalog loading, requirement analysis, weighting and deck generation.
"""

from inkforge.services.card_catalog import (
    CatalogFetchError,
    download_catalog,
    fetch_catalog_records,
    get_catalog,
    load_catalog,
)
from inkforge.services.card_provider import (
    NextCardProvider,
    WeightedCardProvider,
    complete_deck,
)
from inkforge.services.deck_formatter import (
    cost_curve,
    format_deck,
    grouped_cards,
    inktable_import_link,
    sort_deck,
)
from inkforge.services.deck_generator import (
    DeckGenerator,
    prune_singletons,
    remove_cards_without_requirements,
    validate_inks,
    weighted_choice,
)
from inkforge.services.requirement_analyzer import (
    CatalogVocabulary,
    analyze_card,
    analyze_catalog,
)
from inkforge.services.weight_calculator import WeightCalculator

__all__ = [
    # Catalog
    "CatalogFetchError",
    "download_catalog",
    "fetch_catalog_records",
    "get_catalog",
    "load_catalog",
    # Analysis
    "CatalogVocabulary",
    "analyze_card",
    "analyze_catalog",
    # Generation
    "DeckGenerator",
    "WeightCalculator",
    "prune_singletons",
    "remove_cards_without_requirements",
    "validate_inks",
    "weighted_choice",
    # Providers
    "NextCardProvider",
    "WeightedCardProvider",
    "complete_deck",
    # Formatting
    "cost_curve",
    "format_deck",
    "grouped_cards",
    "inktable_import_link",
    "sort_deck",
]
