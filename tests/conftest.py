import random
from collections.abc import Callable
from typing import Any

import pytest

from inkforge.models.card import ANY_SHIFT_TARGET_ID, Card, Keywords
from inkforge.services import card_catalog
from inkforge.services.requirement_analyzer import analyze_catalog


@pytest.fixture(autouse=True)
def clear_catalog_cache():
    """Never share the cached catalog between tests."""
    card_catalog.get_catalog.cache_clear()
    yield
    card_catalog.get_catalog.cache_clear()


def make_card(
    card_id: str,
    name: str | None = None,
    cost: int = 1,
    ink: str = "Amber",
    keywords: dict[str, int | None] | None = None,
    **fields: Any,
) -> Card:
    """Build a Card with sensible defaults for tests."""
    fields.setdefault("inkwell", True)
    fields.setdefault("card_types", ("Character",))
    return Card(
        id=card_id,
        name=name or card_id,
        cost=cost,
        ink=ink,
        keywords=Keywords.from_mapping(keywords or {}),
        **fields,
    )


@pytest.fixture
def card_factory() -> Callable[..., Card]:
    """Factory for test cards."""
    return make_card


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible generation."""
    return random.Random(1234)


@pytest.fixture
def vanilla_catalog() -> list[Card]:
    """
    Dependency-free catalog: five inkable characters per cost 1-6 in Amber
    and in Steel, plus one dual-ink card and one banned card.
    """
    cards = []
    for ink in ("Amber", "Steel"):
        for cost in range(1, 7):
            for n in range(5):
                cards.append(
                    make_card(
                        f"{ink.lower()}-{cost}-{n}",
                        name=f"{ink} Hero {cost}{n}",
                        cost=cost,
                        ink=ink,
                        lore=1,
                        strength=cost,
                        willpower=cost,
                    )
                )
    cards.append(make_card("dual-1", name="Dual Hero", cost=2, ink="Amber", inks=("Amber", "Ruby")))
    cards.append(make_card("banned-1", name="Banned Hero", cost=2, ink="Amber", legality="banned"))
    return cards


@pytest.fixture
def raw_record() -> dict[str, Any]:
    """A raw Lorcast card record."""
    return {
        "id": "crd_0001",
        "name": "Mickey Mouse",
        "version": "Brave Little Tailor",
        "cost": 8,
        "inkwell": False,
        "ink": "Amber",
        "inks": None,
        "keywords": ["Shift", "Evasive"],
        "type": ["Character"],
        "classifications": ["Floodborn", "Hero"],
        "text": (
            "Shift 5 (You may pay 5 {I} to play this on top of one of your "
            "characters named Mickey Mouse.)\nEvasive (Only characters with "
            "Evasive can challenge this character.)\nWHO'S NEXT? Whenever this "
            "character quests, you may draw a card."
        ),
        "lore": 4,
        "strength": 8,
        "willpower": 8,
        "legalities": {"core": "legal"},
        "image_uris": {"digital": {"large": "https://cards.lorcast.io/mickey.avif"}},
    }


@pytest.fixture
def analyzed_catalog() -> list[Card]:
    """
    Amber catalog run through the requirement analyzer: filler characters
    at every cost plus Shift cards, Morph, a keyword-dependent card and a
    classification-dependent card with the cards they depend on.
    """
    cards = [
        make_card(f"filler-{cost}-{n}", name=f"Filler {cost}{n}", cost=cost, lore=1)
        for cost in range(1, 7)
        for n in range(4)
    ]
    cards += [
        make_card("mickey-base", name="Mickey Mouse", version="True Friend", cost=2),
        make_card(
            "mickey-shift",
            name="Mickey Mouse",
            version="Wayward Sorcerer",
            cost=5,
            keywords={"Shift": 3},
        ),
        make_card("goofy-shift", name="Goofy", version="Super Goof", cost=4, keywords={"Shift": 2}),
        make_card(ANY_SHIFT_TARGET_ID, name="Morph", version="Space Goo", cost=2),
        make_card("peter-pan", name="Peter Pan", cost=3, keywords={"Evasive": None}),
        make_card(
            "captain-hook",
            name="Captain Hook",
            cost=3,
            sanitized_rules_text="your characters with evasive get +1 lore.",
        ),
        make_card("smee", name="Smee", cost=2, classifications=("Pirate",)),
        make_card(
            "pirate-captain",
            name="Pirate Captain",
            cost=4,
            sanitized_rules_text="your pirate characters get +1 strength.",
        ),
    ]
    return analyze_catalog(cards)
