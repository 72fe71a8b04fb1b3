"""
Deck generation service.

Builds a legal deck from an analyzed catalog for one or two inks.

Strategy:
1. Filter the catalog to legal cards whose inks fit the requested inks
2. Sample cards until the deck is full: pick a cost bucket from the
   archetype's curve, weight the bucket's cards, pick one, add 1-4 copies
3. Repair: remove cards whose requirements the rest of the deck does not
   meet (until nothing changes), prune diffuse single copies
4. If repair left the deck short, sample again from the survivors until the
   retry budget runs out
"""

import logging
import random
from collections.abc import Iterable, Sequence
from typing import TypeVar

from inkforge.config import (
    ARCHETYPE_CURVES,
    COPY_COUNT_LADDER,
    DEFAULT_ARCHETYPE,
    settings,
)
from inkforge.models.card import Card, Ink
from inkforge.models.deck import MAX_SINGLETONS, Deck, GenerationResult, GenerationStatus
from inkforge.models.failure import FailureKind, KnownError, NoPickableCandidateError
from inkforge.services.weight_calculator import WeightCalculator

logger = logging.getLogger(__name__)

# Cost bucket that also holds every more expensive card
TOP_COST_BUCKET = 5

MAX_COPIES_PER_STEP = 4

T = TypeVar("T")


def validate_inks(inks: Iterable[str]) -> tuple[str, ...]:
    """
    Normalize requested inks.

    Accepts ink names in any case. Duplicates collapse ("Ruby", "Ruby" is a
    mono-Ruby request).

    Raises:
        KnownError: If there are no inks, more than two, or an unknown ink
    """
    by_lower = {ink.value.lower(): ink.value for ink in Ink}
    normalized: list[str] = []
    for ink in inks:
        value = by_lower.get(str(ink).strip().lower())
        if value is None:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Unknown ink: {ink}",
                suggestion=f"Use one of: {', '.join(by_lower.values())}",
            )
        if value not in normalized:
            normalized.append(value)

    if not 1 <= len(normalized) <= 2:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"A deck uses one or two inks, got {len(normalized)}.",
        )
    return tuple(normalized)


def curve_for(archetype: str) -> dict[int, int]:
    """
    Target cards per cost bucket for an archetype.

    Raises:
        KnownError: If the archetype is unknown
    """
    curve = ARCHETYPE_CURVES.get(archetype)
    if curve is None:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Unknown archetype: {archetype}",
            suggestion=f"Use one of: {', '.join(ARCHETYPE_CURVES)}",
        )
    return curve


def card_fits_inks(card: Card, inks: Sequence[str]) -> bool:
    """A card fits when every ink it needs was requested."""
    return set(card.inks) <= set(inks)


def in_cost_bucket(card: Card, bucket: int) -> bool:
    if bucket == TOP_COST_BUCKET:
        return card.cost >= TOP_COST_BUCKET
    return card.cost == bucket


def weighted_choice(items: Sequence[T], weights: Sequence[float], rng: random.Random) -> T:
    """
    Pick one item with probability proportional to its weight.

    Draws r uniformly from [0, total) and returns the first item whose
    cumulative weight is strictly greater than r. A draw landing exactly on
    a cumulative boundary therefore selects the next item, and zero-weight
    items are never selected.

    Raises:
        ValueError: If there are no items or the total weight is not positive
    """
    if not items or len(items) != len(weights):
        raise ValueError("weighted_choice needs one weight per item")

    total = sum(weights)
    if total <= 0:
        raise ValueError("weighted_choice needs a positive total weight")

    threshold = rng.random() * total
    cumulative = 0.0
    for item, weight in zip(items, weights, strict=True):
        cumulative += weight
        if threshold < cumulative:
            return item

    # Float rounding can leave cumulative a hair under total
    return next(item for item, weight in zip(reversed(items), reversed(weights)) if weight > 0)


class DeckGenerator:
    """
    Weighted-random deck builder with dependency repair.

    Usage:
        generator = DeckGenerator(analyze_catalog(cards), rng=random.Random(7))
        result = generator.generate_deck(["Amber", "Steel"])
        result.raise_for_status()
    """

    def __init__(
        self,
        cards: Sequence[Card],
        weight_calculator: WeightCalculator | None = None,
        rng: random.Random | None = None,
        retry_budget: int | None = None,
        deck_size: int | None = None,
    ) -> None:
        self.cards = list(cards)
        self.retry_budget = settings.retry_budget if retry_budget is None else retry_budget
        self.deck_size = settings.deck_size if deck_size is None else deck_size
        self.weight_calculator = weight_calculator or WeightCalculator(self.retry_budget)
        self.rng = rng or random.Random(settings.random_seed)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter_cards(self, inks: Sequence[str]) -> list[Card]:
        """Legal catalog cards playable with the given inks."""
        return [card for card in self.cards if card.is_legal and card_fits_inks(card, inks)]

    # ------------------------------------------------------------------
    # Generation loop
    # ------------------------------------------------------------------

    def generate_deck(
        self,
        inks: Iterable[str],
        deck: Iterable[Card] | None = None,
        archetype: str = DEFAULT_ARCHETYPE,
    ) -> GenerationResult:
        """
        Generate a deck, starting from an optional partial deck.

        Args:
            inks: One or two ink names
            deck: Cards to keep (cards outside the inks are dropped)
            archetype: Weighting profile, a key of ARCHETYPE_CURVES

        Returns:
            GenerationResult. `status` is COMPLETE for a legal full deck,
            EMPTY_INK_POOL when no card fits the inks, and
            RETRY_BUDGET_EXHAUSTED with the best-effort deck otherwise.

        Raises:
            KnownError: Invalid inks, archetype or starting deck
            NoPickableCandidateError: No card can be added in any cost bucket
        """
        requested = validate_inks(inks)
        curve = curve_for(archetype)

        pool = self.filter_cards(requested)
        if not pool:
            logger.warning("No legal cards for inks %s", ", ".join(requested))
            return GenerationResult(
                deck=Deck(),
                inks=requested,
                archetype=archetype,
                status=GenerationStatus.EMPTY_INK_POOL,
                target_size=self.deck_size,
            )

        current = self._starting_deck(deck, requested)
        tries_remaining = self.retry_budget
        attempts = 0

        while True:
            logger.info(
                "Generating %s deck for %s, %d tries remaining",
                archetype,
                "/".join(requested),
                tries_remaining,
            )
            self._fill(current, pool, curve, archetype, tries_remaining)
            attempts += 1

            current = self.repair(current)
            if len(current) == self.deck_size:
                return GenerationResult(
                    deck=current,
                    inks=requested,
                    archetype=archetype,
                    status=GenerationStatus.COMPLETE,
                    attempts=attempts,
                    target_size=self.deck_size,
                )

            if tries_remaining <= 0:
                logger.warning(
                    "Retry budget exhausted after %d attempts with %d cards",
                    attempts,
                    len(current),
                )
                return GenerationResult(
                    deck=current,
                    inks=requested,
                    archetype=archetype,
                    status=GenerationStatus.RETRY_BUDGET_EXHAUSTED,
                    attempts=attempts,
                    target_size=self.deck_size,
                    notes=[f"Repair left {len(current)} of {self.deck_size} cards"],
                )

            tries_remaining -= 1

    def _starting_deck(self, deck: Iterable[Card] | None, inks: Sequence[str]) -> Deck:
        start = Deck(card for card in (deck or ()) if card_fits_inks(card, inks))

        if len(start) > self.deck_size:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Starting deck has {len(start)} cards, more than {self.deck_size}.",
            )
        for card in start.unique_cards():
            if start.count(card) > card.max_copies:
                raise KnownError(
                    kind=FailureKind.INVALID_INPUT,
                    message=f"Starting deck has too many copies of {card.title}.",
                )
        return start

    def _fill(
        self,
        deck: Deck,
        pool: Sequence[Card],
        curve: dict[int, int],
        archetype: str,
        tries_remaining: int,
    ) -> None:
        """Sample cards into the deck until it is full."""
        while len(deck) < self.deck_size:
            card = self.sample_card(pool, deck, curve, archetype, tries_remaining)
            copies = self.pick_copy_count(card, deck)
            deck.append(card, copies)
            logger.debug("Added %dx %s (%d/%d)", copies, card.title, len(deck), self.deck_size)

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def cost_slots(self, deck: Deck, curve: dict[int, int]) -> dict[int, int]:
        """
        Open slots per cost bucket.

        Target count minus cards already at that cost, clamped at zero so an
        over-filled bucket is simply never picked.
        """
        slots: dict[int, int] = {}
        for bucket, target in curve.items():
            present = deck.count_at_cost(bucket, or_more=bucket == TOP_COST_BUCKET)
            slots[bucket] = max(target - present, 0)
        return slots

    def pick_cost(self, deck: Deck, curve: dict[int, int]) -> int:
        """
        Pick a cost bucket, favoring buckets furthest below their target.

        When every bucket is full (the deck holds cards outside the curve,
        e.g. after a partial start) buckets are picked uniformly.
        """
        slots = self.cost_slots(deck, curve)
        buckets = list(slots)
        if sum(slots.values()) <= 0:
            return self.rng.choice(buckets)
        return weighted_choice(buckets, [slots[b] for b in buckets], self.rng)

    def sample_card(
        self,
        pool: Sequence[Card],
        deck: Deck,
        curve: dict[int, int],
        archetype: str = DEFAULT_ARCHETYPE,
        tries_remaining: int | None = None,
    ) -> Card:
        """
        Pick the next card for the deck.

        Tries the sampled cost bucket first, then every other bucket in order
        of open slots.

        Raises:
            NoPickableCandidateError: If no bucket has a pickable card
        """
        first = self.pick_cost(deck, curve)
        slots = self.cost_slots(deck, curve)
        others = sorted((b for b in curve if b != first), key=lambda b: -slots[b])

        for bucket in (first, *others):
            try:
                return self.pick_card(pool, deck, bucket, archetype, tries_remaining)
            except NoPickableCandidateError:
                logger.debug("Nothing pickable at cost bucket %d", bucket)

        raise NoPickableCandidateError(cost_buckets=(first, *others), deck_size=len(deck))

    def pick_card(
        self,
        pool: Sequence[Card],
        deck: Deck,
        bucket: int,
        archetype: str = DEFAULT_ARCHETYPE,
        tries_remaining: int | None = None,
    ) -> Card:
        """
        Pick one card of a cost bucket proportionally to its weight.

        Raises:
            NoPickableCandidateError: If every candidate weighs 0 or is capped
        """
        deck_cards = deck.cards
        candidates: list[Card] = []
        weights: list[float] = []

        for card in pool:
            if not card.is_legal or not in_cost_bucket(card, bucket):
                continue
            if deck.count(card) >= card.max_copies:
                continue
            weight = self.weight_calculator.calculate_weight(
                card, deck_cards, archetype, tries_remaining
            )
            if weight <= 0:
                continue
            candidates.append(card)
            weights.append(weight)

        if not candidates:
            raise NoPickableCandidateError(cost_buckets=(bucket,), deck_size=len(deck))

        return weighted_choice(candidates, weights, self.rng)

    def pick_copy_count(self, card: Card, deck: Deck) -> int:
        """
        How many copies of a picked card to add in one step.

        Drawn from COPY_COUNT_LADDER, re-rolled until it fits the open deck
        slots and the card's remaining copies.
        """
        limit = min(
            MAX_COPIES_PER_STEP,
            self.deck_size - len(deck),
            card.max_copies - deck.count(card),
        )
        if limit <= 1:
            return 1

        counts = list(COPY_COUNT_LADDER)
        chances = [COPY_COUNT_LADDER[c] for c in counts]
        while True:
            copies = self.rng.choices(counts, weights=chances)[0]
            if copies <= limit:
                return copies

    # ------------------------------------------------------------------
    # Repair
    # ------------------------------------------------------------------

    def repair(self, deck: Deck) -> Deck:
        """
        Remove cards that do not belong in the deck.

        Alternates dependency removal and single-copy pruning until neither
        removes anything, so repairing a repaired deck changes nothing.

        Returns:
            A new, repaired Deck
        """
        repaired = deck.copy()

        while True:
            removed = remove_cards_without_requirements(repaired)
            removed += prune_singletons(repaired)
            if not removed:
                return repaired


def remove_cards_without_requirements(deck: Deck) -> int:
    """
    Remove cards whose requirements the rest of the deck does not meet.

    Repeats until a pass removes nothing, since removing one card can break
    another card's requirement.

    Returns:
        Number of cards removed
    """
    total = 0
    changed = True
    while changed:
        changed = False
        for card in deck.unique_cards():
            if card in deck and not card.deck_meets_requirements(deck):
                removed = deck.remove_card(card)
                logger.debug("Removing %dx %s: requirements not met", removed, card.title)
                total += removed
                changed = True
    return total


def prune_singletons(deck: Deck) -> int:
    """
    Remove every single-copy card when there are more than MAX_SINGLETONS.

    Returns:
        Number of cards removed
    """
    singletons = deck.singletons()
    if len(singletons) <= MAX_SINGLETONS:
        return 0

    logger.debug("Removing %d single-copy cards", len(singletons))
    for card in singletons:
        deck.remove_card(card)
    return len(singletons)
