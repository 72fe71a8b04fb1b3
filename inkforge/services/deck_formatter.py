"""
Deck formatting.

Display ordering, text summary, cost curve and the Inktable import link for
generated decks. Formatting never validates: it trusts the deck it is given.
"""

import base64
import uuid
from collections.abc import Sequence
from urllib.parse import quote

from inkforge.models.card import CARD_TYPE_ORDER, Card
from inkforge.models.deck import Deck, GenerationResult

INKTABLE_IMPORT_URL = "https://inktable.net/lor/import"

MAX_CURVE_COST = 10


def _sort_key(card: Card, inks: Sequence[str]) -> tuple[int, int, int, str]:
    ink_position = inks.index(card.ink) if card.ink in inks else len(inks)
    first_type = card.card_types[0] if card.card_types else ""
    type_position = (
        CARD_TYPE_ORDER.index(first_type) if first_type in CARD_TYPE_ORDER else len(CARD_TYPE_ORDER)
    )
    return (ink_position, type_position, card.cost, card.title)


def sort_deck(deck: Deck, inks: Sequence[str]) -> Deck:
    """Order cards by ink, card type, cost, then title."""
    return Deck(sorted(deck, key=lambda card: _sort_key(card, inks)))


def cost_curve(deck: Deck) -> dict[str, dict[str, list[int]]]:
    """
    Card counts per cost, split by ink and inkability.

    Costs above MAX_CURVE_COST are counted in the last column.

    Returns:
        {ink: {"inkable": [count per cost 0..10], "non_inkable": [...]}}
    """
    curve: dict[str, dict[str, list[int]]] = {}
    for card in deck:
        for ink in card.inks:
            counts = curve.setdefault(
                ink,
                {
                    "inkable": [0] * (MAX_CURVE_COST + 1),
                    "non_inkable": [0] * (MAX_CURVE_COST + 1),
                },
            )
            column = "inkable" if card.inkwell else "non_inkable"
            counts[column][min(card.cost, MAX_CURVE_COST)] += 1
    return dict(sorted(curve.items()))


def grouped_cards(deck: Deck) -> list[tuple[Card, int]]:
    """Distinct cards with their copy counts, in deck order."""
    counts = deck.title_counts()
    return [(card, counts[card.title]) for card in deck.unique_cards()]


def _dreamborn_key(card: Card) -> str:
    return f"{card.name}_{card.version}" if card.version else card.name


def inktable_import_link(deck: Deck, inks: Sequence[str], deck_id: str | None = None) -> str:
    """
    Build an Inktable import URL for a deck.

    The deck is encoded as base64 of "<name>_<version>$<count>|" entries.
    """
    deck_id = deck_id or uuid.uuid4().hex[:6]
    deck_name = quote(f"Generated Deck: {' - '.join(inks)} - {deck_id}", safe="")

    payload = "".join(f"{_dreamborn_key(card)}${count}|" for card, count in grouped_cards(deck))
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")

    return f"{INKTABLE_IMPORT_URL}?svc=dreamborn&name={deck_name}&id={encoded}"


def format_deck(result: GenerationResult) -> str:
    """Format a generation result for display."""
    deck = sort_deck(result.deck, result.inks)
    lines = [f"# {' / '.join(result.inks)} Deck\n"]

    if result.notes:
        lines.append("**Notes:**")
        for note in result.notes:
            lines.append(f"- {note}")
        lines.append("")

    lines.append(f"**Archetype:** {result.archetype.title()}")
    lines.append(f"**Status:** {result.status.value}")
    lines.append(f"**Total Cards:** {len(deck)}/{result.target_size}")

    costs = [min(card.cost, MAX_CURVE_COST) for card in deck]
    curve_items = [(cost, costs.count(cost)) for cost in sorted(set(costs))]
    if curve_items:
        curve_str = " | ".join(f"{cost}:{count}" for cost, count in curve_items)
        lines.append(f"**Cost Curve:** {curve_str}")
    lines.append("")

    current_type = None
    for card, count in grouped_cards(deck):
        card_type = card.card_types[0] if card.card_types else "Other"
        if card_type != current_type:
            if current_type is not None:
                lines.append("")
            lines.append(f"## {card_type}")
            current_type = card_type
        lines.append(f"- {count}x {card.title} ({card.cost})")

    return "\n".join(lines)
