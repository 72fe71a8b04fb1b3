from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from inkforge.models.card import Card
from inkforge.models.failure import EmptyInkPoolError, RetryBudgetExhaustedError

DECK_SIZE = 60

# More single-copy titles than this after repair and the deck is too diffuse
MAX_SINGLETONS = 4


class Deck:
    """
    An ordered multiset of card references.

    Order only matters for display. Copies are counted by title.
    """

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: list[Card] = list(cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return isinstance(card, Card) and any(c.id == card.id for c in self._cards)

    def __repr__(self) -> str:
        return f"Deck({len(self._cards)} cards, {len(self.unique_cards())} unique)"

    @property
    def cards(self) -> list[Card]:
        """Copy of the card list."""
        return list(self._cards)

    def copy(self) -> "Deck":
        return Deck(self._cards)

    def append(self, card: Card, copies: int = 1) -> None:
        self._cards.extend([card] * copies)

    def remove_card(self, card: Card) -> int:
        """Remove every copy of a card. Returns the number removed."""
        before = len(self._cards)
        self._cards = [c for c in self._cards if c.id != card.id]
        return before - len(self._cards)

    def count(self, card: Card) -> int:
        """Copies of the card's title in the deck."""
        return sum(1 for c in self._cards if c.title == card.title)

    def others(self, card: Card) -> list[Card]:
        """Every card whose id differs from `card`."""
        return card.others_in(self._cards)

    def title_counts(self) -> Counter[str]:
        return Counter(c.title for c in self._cards)

    def unique_cards(self) -> list[Card]:
        """Distinct cards in first-seen order."""
        seen: dict[str, Card] = {}
        for card in self._cards:
            seen.setdefault(card.id, card)
        return list(seen.values())

    def singletons(self) -> list[Card]:
        """Distinct cards present exactly once."""
        counts = self.title_counts()
        return [card for card in self.unique_cards() if counts[card.title] == 1]

    def inks(self) -> set[str]:
        return {ink for card in self._cards for ink in card.inks}

    def count_at_cost(self, cost: int, or_more: bool = False) -> int:
        if or_more:
            return sum(1 for c in self._cards if c.cost >= cost)
        return sum(1 for c in self._cards if c.cost == cost)


class GenerationStatus(str, Enum):
    """Terminal state of a generation call."""

    COMPLETE = "complete"
    RETRY_BUDGET_EXHAUSTED = "retry_budget_exhausted"
    EMPTY_INK_POOL = "empty_ink_pool"


@dataclass
class GenerationResult:
    """
    Outcome of a deck generation call.

    Attributes:
        deck: The generated deck (best effort when not complete)
        inks: Inks the deck was generated for
        archetype: Weighting profile used
        status: How generation ended
        attempts: Repair rounds used
        target_size: Requested deck size
    """

    deck: Deck
    inks: tuple[str, ...]
    archetype: str = "default"
    status: GenerationStatus = GenerationStatus.COMPLETE
    attempts: int = 0
    target_size: int = DECK_SIZE
    notes: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.status == GenerationStatus.COMPLETE

    def raise_for_status(self) -> "GenerationResult":
        """
        Raise the matching error if generation did not complete.

        Returns self so calls can be chained.
        """
        if self.status == GenerationStatus.EMPTY_INK_POOL:
            raise EmptyInkPoolError(self.inks)
        if self.status == GenerationStatus.RETRY_BUDGET_EXHAUSTED:
            raise RetryBudgetExhaustedError(
                attempts=self.attempts,
                deck_size=len(self.deck),
                target_size=self.target_size,
            )
        return self
