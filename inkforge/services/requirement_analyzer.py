"""
Requirement analyzer.

Annotates every card of a catalog with the keywords, classifications, card
types and card names its rules text depends on. Runs once over the whole
catalog before any deck is generated; the result is shared read-only.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from inkforge.models.card import CHARACTER, ITEM, KNOWN_KEYWORDS, Card, Requirements

logger = logging.getLogger(__name__)

# "gains Evasive", "gain Challenger +2": granted keywords are not needed
_GAINS_KEYWORD = re.compile(r"gains? \w+(\s\+\d)?")

_ITEM_PHRASES = re.compile(r"chosen item of yours|your items?|reveal an item")


@dataclass(frozen=True)
class CatalogVocabulary:
    """Everything a rules text may refer to, collected from the catalog."""

    keywords: tuple[str, ...]
    classifications: tuple[str, ...]
    card_types: tuple[str, ...]
    card_names: tuple[str, ...]

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "CatalogVocabulary":
        cards = list(cards)
        return cls(
            keywords=KNOWN_KEYWORDS,
            classifications=_unique(tag for card in cards for tag in card.classifications),
            card_types=_unique(t for card in cards for t in card.card_types),
            card_names=_unique(card.name for card in cards),
        )


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def required_keywords(text: str, vocabulary: CatalogVocabulary) -> set[str]:
    compare_text = _GAINS_KEYWORD.sub("", text)
    return {keyword for keyword in vocabulary.keywords if keyword.lower() in compare_text}


def required_classifications(text: str, vocabulary: CatalogVocabulary) -> set[str]:
    found = set()
    for classification in vocabulary.classifications:
        lowered = classification.lower()
        # A card that challenges a Pirate does not need Pirates of its own
        compare_text = text.replace(f"challenges a {lowered}", "")
        if lowered in compare_text:
            found.add(classification)
    return found


def required_card_types(text: str, vocabulary: CatalogVocabulary) -> set[str]:
    found = set()
    for card_type in vocabulary.card_types:
        if card_type == CHARACTER:
            continue
        if card_type == ITEM:
            if _ITEM_PHRASES.search(text):
                found.add(card_type)
            continue
        if card_type.lower() in text:
            found.add(card_type)
    return found


def required_card_names(card: Card, text: str, vocabulary: CatalogVocabulary) -> set[str]:
    own_names = {card.name, *card.name_segments}
    return {
        name
        for name in vocabulary.card_names
        if name not in own_names and f" {name.lower()}" in text
    }


def analyze_card(card: Card, vocabulary: CatalogVocabulary) -> Card:
    """
    Infer the requirements of one card.

    Returns:
        A new Card with `requirements` filled in
    """
    text = card.sanitized_rules_text
    keywords: set[str] = set()
    classifications: set[str] = set()
    card_types: set[str] = set()
    card_names: set[str] = set()

    if text:
        keywords = required_keywords(text, vocabulary)
        classifications = required_classifications(text, vocabulary)
        card_types = required_card_types(text, vocabulary)
        card_names = required_card_names(card, text, vocabulary)

    # Shift needs a same-named character to land on
    if card.has_shift:
        card_names.update(card.name_segments)

    requirements = Requirements(
        keywords=frozenset(keywords),
        classifications=frozenset(classifications),
        card_types=frozenset(card_types),
        card_names=frozenset(card_names),
    )
    return replace(card, requirements=requirements)


def analyze_catalog(cards: Sequence[Card]) -> list[Card]:
    """
    Annotate a whole catalog with card requirements.

    Idempotent: requirements depend only on rules text and the catalog's
    vocabulary, so analyzing an analyzed catalog yields equal cards.

    Args:
        cards: Parsed catalog cards

    Returns:
        New list of cards with requirements filled in, in input order
    """
    vocabulary = CatalogVocabulary.from_cards(cards)
    analyzed = [analyze_card(card, vocabulary) for card in cards]

    with_requirements = sum(1 for card in analyzed if not card.requirements.is_empty())
    logger.info(
        "Analyzed %d cards, %d have deck requirements",
        len(analyzed),
        with_requirements,
    )
    return analyzed
