"""Tests for deck formatting and export."""

import base64
from urllib.parse import parse_qs, urlparse

from inkforge.models.deck import Deck, GenerationResult, GenerationStatus
from inkforge.services.deck_formatter import (
    INKTABLE_IMPORT_URL,
    cost_curve,
    format_deck,
    grouped_cards,
    inktable_import_link,
    sort_deck,
)


class TestSortDeck:
    def test_orders_by_ink_type_cost_title(self, card_factory) -> None:
        steel = card_factory("s", name="Steel Guy", cost=1, ink="Steel")
        action = card_factory("x", name="Zap", cost=1, card_types=("Action",))
        pricey = card_factory("p", name="Alpha", cost=3)
        cheap_b = card_factory("b", name="Bravo", cost=1)
        cheap_a = card_factory("a", name="Able", cost=1)
        deck = Deck([steel, action, pricey, cheap_b, cheap_a])

        ordered = sort_deck(deck, ("Amber", "Steel"))

        assert [c.id for c in ordered] == ["a", "b", "p", "x", "s"]

    def test_does_not_modify_deck(self, card_factory) -> None:
        deck = Deck([card_factory("b", cost=2), card_factory("a", cost=1)])

        sort_deck(deck, ("Amber",))

        assert [c.id for c in deck] == ["b", "a"]


class TestCostCurve:
    def test_counts_by_ink_and_inkability(self, card_factory) -> None:
        inkable = card_factory("a", cost=2)
        expensive = card_factory("b", cost=12, inkwell=False)
        deck = Deck([inkable, inkable, expensive])

        curve = cost_curve(deck)

        assert curve["Amber"]["inkable"][2] == 2
        assert curve["Amber"]["non_inkable"][10] == 1
        assert len(curve["Amber"]["inkable"]) == 11

    def test_dual_ink_card_counts_for_both(self, card_factory) -> None:
        dual = card_factory("d", cost=4, ink="Amber", inks=("Amber", "Ruby"))

        curve = cost_curve(Deck([dual]))

        assert set(curve) == {"Amber", "Ruby"}
        assert curve["Ruby"]["inkable"][4] == 1


class TestInktableImportLink:
    def test_encodes_titles_and_counts(self, card_factory) -> None:
        elsa = card_factory("e", name="Elsa", version="Snow Queen")
        stitch = card_factory("s", name="Stitch")
        deck = Deck([elsa, elsa, stitch])

        link = inktable_import_link(deck, ("Amber",), deck_id="abc123")

        assert link.startswith(f"{INKTABLE_IMPORT_URL}?svc=dreamborn&name=")
        query = parse_qs(urlparse(link).query)
        assert query["name"] == ["Generated Deck: Amber - abc123"]
        encoded = link.split("&id=", 1)[1]
        payload = base64.b64decode(encoded).decode("utf-8")
        assert payload == "Elsa_Snow Queen$2|Stitch$1|"

    def test_random_deck_id(self, card_factory) -> None:
        deck = Deck([card_factory("a")])

        assert inktable_import_link(deck, ("Amber",)) != inktable_import_link(deck, ("Amber",))


class TestFormatDeck:
    def test_includes_summary_and_cards(self, card_factory) -> None:
        elsa = card_factory("e", name="Elsa", version="Snow Queen", cost=3)
        song = card_factory("s", name="Let It Go", cost=5, card_types=("Action", "Song"))
        result = GenerationResult(
            deck=Deck([elsa, elsa, song]),
            inks=("Amber",),
            attempts=2,
        )

        text = format_deck(result)

        assert "# Amber Deck" in text
        assert "**Status:** complete" in text
        assert "**Total Cards:** 3/60" in text
        assert "**Cost Curve:** 3:2 | 5:1" in text
        assert "## Character" in text
        assert "- 2x Elsa - Snow Queen (3)" in text
        assert "## Action" in text

    def test_includes_notes_for_best_effort(self, card_factory) -> None:
        result = GenerationResult(
            deck=Deck([card_factory("a")]),
            inks=("Amber", "Steel"),
            status=GenerationStatus.RETRY_BUDGET_EXHAUSTED,
            notes=["Repair left 1 of 60 cards"],
        )

        text = format_deck(result)

        assert "# Amber / Steel Deck" in text
        assert "- Repair left 1 of 60 cards" in text
        assert "retry_budget_exhausted" in text


class TestGroupedCards:
    def test_groups_in_deck_order(self, card_factory) -> None:
        a = card_factory("a")
        b = card_factory("b")

        assert grouped_cards(Deck([b, a, b])) == [(b, 2), (a, 1)]
