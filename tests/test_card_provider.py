"""Tests for next-card providers."""

from collections.abc import Sequence

import pytest

from inkforge.models.card import Card
from inkforge.models.deck import Deck
from inkforge.models.failure import FailureKind, IllegalPickError, KnownError
from inkforge.services.card_provider import (
    NextCardProvider,
    WeightedCardProvider,
    complete_deck,
)
from inkforge.services.deck_generator import DeckGenerator


class ScriptedProvider:
    """Provider that returns a fixed sequence of picks."""

    def __init__(self, picks: Sequence[Card | None]):
        self.picks = list(picks)

    def next_card(self, deck: Deck, candidates: Sequence[Card]) -> Card | None:
        return self.picks.pop(0) if self.picks else None


class TestCompleteDeck:
    def test_appends_until_provider_stops(self, card_factory) -> None:
        a = card_factory("a")
        b = card_factory("b")
        provider = ScriptedProvider([a, b, a, None, b])

        deck = complete_deck(provider, Deck(), [a, b])

        assert [c.id for c in deck] == ["a", "b", "a"]

    def test_stops_at_deck_size(self, card_factory) -> None:
        puppy = card_factory("p", max_copies=60)
        provider = ScriptedProvider([puppy] * 10)

        deck = complete_deck(provider, Deck(), [puppy], deck_size=5)

        assert len(deck) == 5

    def test_does_not_modify_input_deck(self, card_factory) -> None:
        a = card_factory("a")
        start = Deck([a])

        complete_deck(ScriptedProvider([a]), start, [a])

        assert len(start) == 1

    def test_rejects_card_outside_candidates(self, card_factory) -> None:
        a = card_factory("a")
        stranger = card_factory("z")

        with pytest.raises(IllegalPickError) as exc_info:
            complete_deck(ScriptedProvider([stranger]), Deck(), [a])

        assert exc_info.value.kind == FailureKind.VALIDATION_FAILED

    def test_rejects_pick_over_cap(self, card_factory) -> None:
        a = card_factory("a")

        with pytest.raises(IllegalPickError):
            complete_deck(ScriptedProvider([a] * 5), Deck(), [a])


class TestWeightedCardProvider:
    def test_satisfies_protocol(self, vanilla_catalog, rng) -> None:
        provider = WeightedCardProvider(DeckGenerator(vanilla_catalog, rng=rng))

        assert isinstance(provider, NextCardProvider)

    def test_fills_deck_with_candidates(self, vanilla_catalog, rng) -> None:
        generator = DeckGenerator(vanilla_catalog, rng=rng)
        candidates = generator.filter_cards(("Steel",))

        deck = complete_deck(WeightedCardProvider(generator), Deck(), candidates)

        assert len(deck) == 60
        assert deck.inks() == {"Steel"}
        for card in deck.unique_cards():
            assert deck.count(card) <= card.max_copies

    def test_returns_none_when_nothing_pickable(self, card_factory, rng) -> None:
        a = card_factory("a")
        provider = WeightedCardProvider(DeckGenerator([a], rng=rng))

        assert provider.next_card(Deck([a] * 4), [a]) is None

    def test_returns_none_when_full(self, card_factory, rng) -> None:
        puppy = card_factory("p", max_copies=60)
        provider = WeightedCardProvider(DeckGenerator([puppy], rng=rng))

        assert provider.next_card(Deck([puppy] * 60), [puppy]) is None

    def test_unknown_archetype_is_invalid_input(self, vanilla_catalog, rng) -> None:
        generator = DeckGenerator(vanilla_catalog, rng=rng)
        provider = WeightedCardProvider(generator, archetype="control")

        with pytest.raises(KnownError) as exc_info:
            provider.next_card(Deck(), generator.filter_cards(("Amber",)))

        assert exc_info.value.kind == FailureKind.INVALID_INPUT
