"""
Next-card providers.

A provider proposes one card at a time for a partial deck, or signals the
end of the deck by returning None. The weighted sampler is one provider;
alternative generators (e.g. a learned sequence model) plug in behind the
same protocol and get the same legality checks.
"""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from inkforge.config import DEFAULT_ARCHETYPE
from inkforge.models.card import Card
from inkforge.models.deck import DECK_SIZE, Deck
from inkforge.models.failure import IllegalPickError, NoPickableCandidateError
from inkforge.services.deck_generator import DeckGenerator, curve_for

logger = logging.getLogger(__name__)


@runtime_checkable
class NextCardProvider(Protocol):
    """Anything that can extend a partial deck by one card."""

    def next_card(self, deck: Deck, candidates: Sequence[Card]) -> Card | None:
        """
        Propose the next card.

        Args:
            deck: Partial deck (read-only)
            candidates: Legal, ink-filtered cards to choose from

        Returns:
            A card from `candidates`, or None when the deck is finished
        """
        ...


class WeightedCardProvider:
    """Adapts DeckGenerator's weighted sampling to NextCardProvider."""

    def __init__(self, generator: DeckGenerator, archetype: str = DEFAULT_ARCHETYPE) -> None:
        self.generator = generator
        self.archetype = archetype

    def next_card(self, deck: Deck, candidates: Sequence[Card]) -> Card | None:
        if len(deck) >= self.generator.deck_size:
            return None
        try:
            return self.generator.sample_card(
                candidates, deck, curve_for(self.archetype), self.archetype
            )
        except NoPickableCandidateError:
            logger.info("Weighted provider has no candidate left at %d cards", len(deck))
            return None


def complete_deck(
    provider: NextCardProvider,
    deck: Deck,
    candidates: Sequence[Card],
    deck_size: int = DECK_SIZE,
) -> Deck:
    """
    Ask a provider for cards until the deck is full or it signals the end.

    Args:
        provider: Source of next cards
        deck: Partial deck to extend (not modified)
        candidates: Legal, ink-filtered cards the provider may pick from
        deck_size: Target size

    Returns:
        New Deck with the provider's picks appended

    Raises:
        IllegalPickError: If the provider picks a card outside the
            candidates or beyond its copy cap
    """
    allowed = {card.id for card in candidates}
    result = deck.copy()

    while len(result) < deck_size:
        card = provider.next_card(result, candidates)
        if card is None:
            logger.info("Provider ended the deck at %d cards", len(result))
            break
        if card.id not in allowed:
            raise IllegalPickError(card.title, "card is not among the candidates")
        if result.count(card) >= card.max_copies:
            raise IllegalPickError(card.title, f"already {card.max_copies} copies in deck")
        result.append(card)

    return result
