"""
Card weighting for deck generation.

The weight of a candidate is how likely it is to be picked next, given the
partial deck. It starts at BASE_WEIGHT and passes through an ordered chain of
modifiers. Each modifier reads the candidate and the deck and never changes
them. Title presence runs near the end and returns 0 outright for capped
cards.
"""

import re
from collections.abc import Iterable, Sequence

from inkforge.config import DEFAULT_ARCHETYPE
from inkforge.models.card import (
    BODYGUARD,
    CHALLENGER,
    EVASIVE,
    RECKLESS,
    RESIST,
    RUSH,
    SINGER,
    WARD,
    Card,
)

BASE_WEIGHT = 100.0

NON_INKABLE_MULTIPLIER = 0.85
HAS_ABILITY_MULTIPLIER = 1.1

# Songs and singers
SING_TOGETHER = "Sing Together"
SONG_BONUS = 5.0
SING_TOGETHER_SONG_BONUS = 5.0
SING_COST_MISMATCH_PENALTY = -2.0
SONG_SING_COST_MATCH_BONUS = 10.0
SINGER_SONG_MATCH_BONUS = 20.0
SINGER_SING_TOGETHER_BONUS = 20.0

# Shift
SHIFT_CHEAP_BASE_MULTIPLIER = 100.0
SHIFT_EXPENSIVE_BASE_MULTIPLIER = 0.75
FIRST_SHIFT_MULTIPLIER = 100.0

# (substring of sanitized rules text, additive modifier)
EFFECT_MODIFIERS: tuple[tuple[str, float], ...] = (
    ("this character can't {e} to sing songs.", -50.0),
    ("draw a card", 25.0),
    ("draw 3 cards", 50.0),
    ("draws 7 cards", 50.0),
    ("banish", 20.0),
    ("banish all", 30.0),
    ("return", 15.0),
    ("into your inkwell", 20.0),
)

_DRAW_CARDS = re.compile(r"draws? (\d+) cards")
_GAIN_LORE = re.compile(r"gain (\d+) lore")
PER_CARD_DRAWN_BONUS = 5.0
PER_LORE_GAINED_BONUS = 5.0

VANILLA_CHARACTER_MULTIPLIER = 0.5

# Flat keyword bonuses; Challenger and Resist scale with their amount
KEYWORD_MODIFIERS: dict[str, float] = {
    BODYGUARD: 20.0,
    EVASIVE: 20.0,
    RUSH: 20.0,
    WARD: 10.0,
    SINGER: 10.0,
    RECKLESS: 5.0,
}
PER_KEYWORD_AMOUNT_BONUS = 10.0
SCALED_KEYWORDS = (CHALLENGER, RESIST)

# Copies already in the deck
SINGLE_COPY_MULTIPLIER = 1000.0
REPEAT_COPY_ESCALATION = 0.25
DEFAULT_RETRY_BUDGET = 50

# Requirements
SATISFIES_REQUIREMENT_MULTIPLIER = 1.4
UNMET_REQUIREMENTS_MULTIPLIER = 0.1

# Non-default archetypes
ARCHETYPE_CHEAP_COST = 3
ARCHETYPE_INTERACTION_EFFECTS = ("banish", "return")
ARCHETYPE_INTERACTION_MULTIPLIER = 1.5
ARCHETYPE_PER_LORE_BONUS = 0.25


class WeightCalculator:
    """
    Scores candidate cards against a partial deck.

    Usage:
        calculator = WeightCalculator()
        weight = calculator.calculate_weight(card, deck.cards, "aggro", 40)
    """

    def __init__(self, retry_budget: int = DEFAULT_RETRY_BUDGET) -> None:
        self.retry_budget = retry_budget

    def calculate_weight(
        self,
        card: Card,
        deck: Sequence[Card],
        archetype: str = DEFAULT_ARCHETYPE,
        tries_remaining: int | None = None,
    ) -> float:
        """
        Weight of adding `card` to `deck` next.

        Args:
            card: Candidate card
            deck: Cards already in the deck
            archetype: Weighting profile ("default", "aggro")
            tries_remaining: Repair rounds left, defaults to the full budget

        Returns:
            Non-negative weight; 0 means the card must not be picked
        """
        if tries_remaining is None:
            tries_remaining = self.retry_budget

        weight = BASE_WEIGHT
        weight = self._modify_for_inkwell(card, weight)
        weight = self._modify_for_ability(card, weight)
        weight = self._modify_for_song(card, weight, deck)
        weight = self._modify_for_singer(card, weight, deck)
        weight = self._modify_for_shiftable(card, weight, deck)
        weight = self._modify_for_shift(card, weight, deck)
        weight = self._modify_by_effect(card, weight)
        weight = self._modify_by_keywords(card, weight)

        weight = self._modify_by_title_presence(card, weight, deck, tries_remaining)
        if weight <= 0:
            return 0.0

        weight = self._modify_by_requirements(card, weight, deck)
        weight = self._modify_for_archetype(card, weight, archetype)

        return max(weight, 0.0)

    def _modify_for_inkwell(self, card: Card, weight: float) -> float:
        if not card.inkwell:
            weight *= NON_INKABLE_MULTIPLIER
        return weight

    def _modify_for_ability(self, card: Card, weight: float) -> float:
        if card.sanitized_rules_text:
            weight *= HAS_ABILITY_MULTIPLIER
        return weight

    def _modify_for_song(self, card: Card, weight: float, deck: Sequence[Card]) -> float:
        if not card.is_song:
            return weight

        weight += SONG_BONUS
        if SING_TOGETHER in card.rules_text:
            weight += SING_TOGETHER_SONG_BONUS

        for character in deck:
            if not character.is_character:
                continue
            if character.sing_cost < card.cost:
                weight += SING_COST_MISMATCH_PENALTY
            elif character.sing_cost == card.cost:
                weight += SONG_SING_COST_MATCH_BONUS

        return weight

    def _modify_for_singer(self, card: Card, weight: float, deck: Sequence[Card]) -> float:
        if not card.has_singer:
            return weight

        for song in deck:
            if not song.is_song:
                continue
            if song.cost < card.sing_cost:
                weight += SING_COST_MISMATCH_PENALTY
            elif song.cost == card.sing_cost:
                weight += SINGER_SONG_MATCH_BONUS
            if SING_TOGETHER in song.rules_text:
                weight += SINGER_SING_TOGETHER_BONUS

        return weight

    def _modify_for_shiftable(self, card: Card, weight: float, deck: Sequence[Card]) -> float:
        """Reward characters that existing Shift cards can land on."""
        if not card.is_character:
            return weight

        shift_cards = _unique(c for c in deck if c.has_shift and c.id != card.id)
        for shift_card in shift_cards:
            if shift_card.can_shift_from(card):
                if card.cost < shift_card.cost:
                    return weight * SHIFT_CHEAP_BASE_MULTIPLIER
                return weight * SHIFT_EXPENSIVE_BASE_MULTIPLIER

        return weight

    def _modify_for_shift(self, card: Card, weight: float, deck: Sequence[Card]) -> float:
        """Reward Shift cards, more so when the deck holds a base for them."""
        if not card.has_shift:
            return weight

        if not any(c.has_shift and c.id != card.id for c in deck):
            return weight * FIRST_SHIFT_MULTIPLIER

        for base in _unique(c for c in deck if c.is_character and c.id != card.id):
            if card.can_shift_from(base):
                if base.cost < card.cost:
                    return weight * SHIFT_CHEAP_BASE_MULTIPLIER
                return weight * SHIFT_EXPENSIVE_BASE_MULTIPLIER

        return weight

    def _modify_by_effect(self, card: Card, weight: float) -> float:
        text = card.sanitized_rules_text
        has_effect = False

        for effect, modifier in EFFECT_MODIFIERS:
            if effect in text:
                weight += modifier
                has_effect = True

        draw_match = _DRAW_CARDS.search(text)
        if draw_match:
            weight += int(draw_match.group(1)) * PER_CARD_DRAWN_BONUS
            has_effect = True

        lore_match = _GAIN_LORE.search(text)
        if lore_match:
            weight += int(lore_match.group(1)) * PER_LORE_GAINED_BONUS
            has_effect = True

        has_bonus_keyword = any(
            keyword in card.keywords for keyword in (*KEYWORD_MODIFIERS, *SCALED_KEYWORDS)
        )
        if card.is_character and not has_effect and not has_bonus_keyword:
            weight *= VANILLA_CHARACTER_MULTIPLIER

        return weight

    def _modify_by_keywords(self, card: Card, weight: float) -> float:
        for keyword, modifier in KEYWORD_MODIFIERS.items():
            if keyword in card.keywords:
                weight += modifier

        for keyword in SCALED_KEYWORDS:
            if keyword in card.keywords:
                weight += card.keywords.amount(keyword) * PER_KEYWORD_AMOUNT_BONUS

        return weight

    def _modify_by_title_presence(
        self,
        card: Card,
        weight: float,
        deck: Sequence[Card],
        tries_remaining: int,
    ) -> float:
        """
        Favor cards already in the deck, harder as retries run out.

        A card at its copy cap gets weight 0. Every further copy below the
        cap weighs more than the previous one.
        """
        copies = sum(1 for c in deck if c.title == card.title)
        if copies >= card.max_copies:
            return 0.0
        if copies == 0:
            return weight

        budget = max(self.retry_budget, 1)
        consumed = min(max(budget - tries_remaining, 0), budget)
        retry_factor = 1 + consumed / budget

        multiplier = SINGLE_COPY_MULTIPLIER * retry_factor
        if copies > 1:
            multiplier *= 1 + REPEAT_COPY_ESCALATION * (copies - 1)

        return weight * multiplier

    def _modify_by_requirements(self, card: Card, weight: float, deck: Sequence[Card]) -> float:
        if card.satisfies_requirements_of(deck):
            weight *= SATISFIES_REQUIREMENT_MULTIPLIER

        if not card.deck_meets_requirements(deck):
            weight *= UNMET_REQUIREMENTS_MULTIPLIER

        return weight

    def _modify_for_archetype(self, card: Card, weight: float, archetype: str) -> float:
        if archetype == DEFAULT_ARCHETYPE:
            return weight

        text = card.sanitized_rules_text
        if card.cost <= ARCHETYPE_CHEAP_COST and any(
            effect in text for effect in ARCHETYPE_INTERACTION_EFFECTS
        ):
            weight *= ARCHETYPE_INTERACTION_MULTIPLIER

        if card.lore > 0:
            weight *= 1 + ARCHETYPE_PER_LORE_BONUS * card.lore

        return weight


def _unique(cards: Iterable[Card]) -> list[Card]:
    seen: dict[str, Card] = {}
    for card in cards:
        seen.setdefault(card.id, card)
    return list(seen.values())
