"""
Lorcast card record parser.

Turns raw catalog records (as returned by the Lorcast search API) into Card
values: keyword amounts are parsed out of the rules text and the sanitized
rules text used for dependency inference is computed once here.

API docs: https://lorcast.com/docs/api
"""

import re
from typing import Any

from inkforge.models.card import (
    CHALLENGER,
    DEFAULT_MAX_COPIES,
    KNOWN_KEYWORDS,
    RESIST,
    SHIFT,
    SINGER,
    UNLIMITED_COPIES_ID,
    UNLIMITED_MAX_COPIES,
    Card,
    Keywords,
    Legality,
)

# Printed amounts that follow a keyword
_KEYWORD_AMOUNT_PATTERNS: dict[str, re.Pattern[str]] = {
    CHALLENGER: re.compile(r"Challenger \+(\d+)"),
    RESIST: re.compile(r"Resist \+(\d+)"),
    SINGER: re.compile(r"Singer (\d+)"),
    SHIFT: re.compile(r"Shift (\d+)"),
}

# A keyword followed by its parenthetical reminder text on the same line
_REMINDER_PATTERNS: dict[str, re.Pattern[str]] = {
    keyword: re.compile(rf"\b{keyword}\b[^\n(]*\([^)]*\)") for keyword in KNOWN_KEYWORDS
}

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_SYMBOL = re.compile(r"\{[^}]+\}")


class CardParseError(ValueError):
    """Raised when a raw record lacks the fields needed to build a Card."""

    def __init__(self, record_id: str | None, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Cannot parse card {record_id!r}: {reason}")


def normalize_rules_text(text: str) -> str:
    """Lower-case the content of {symbols} so they compare consistently."""
    return _SYMBOL.sub(lambda match: match.group(0).lower(), text)


def parse_keywords(keywords: list[str], rules_text: str) -> Keywords:
    """
    Build the Keywords value for a card.

    Args:
        keywords: Keyword tags from the catalog record
        rules_text: Printed rules text to read amounts from

    Returns:
        Keywords mapping each tag to its amount (None if none printed)
    """
    amounts: dict[str, int | None] = {}
    for keyword in keywords:
        pattern = _KEYWORD_AMOUNT_PATTERNS.get(keyword)
        match = pattern.search(rules_text) if pattern else None
        amounts[keyword] = int(match.group(1)) if match else None
    return Keywords.from_mapping(amounts)


def sanitize_rules_text(rules_text: str, keywords: list[str]) -> str:
    """
    Strip keyword reprints and reminder text from rules text.

    Lines starting with one of the card's own keywords are dropped, each
    keyword's reminder text is removed, then any other parenthetical group.
    The result is lower-cased and trimmed.
    """
    lines = []
    for line in rules_text.split("\n"):
        first_word = line.split(" ")[0]
        if first_word in keywords:
            continue
        lines.append(line)

    text = "\n".join(lines)
    for pattern in _REMINDER_PATTERNS.values():
        text = pattern.sub("", text)
    text = _PARENTHETICAL.sub("", text)
    text = text.replace("(", "").replace(")", "")

    return text.strip().lower()


def _legality(record: dict[str, Any]) -> str:
    legality = record.get("legality")
    if legality is None:
        legality = (record.get("legalities") or {}).get("core", Legality.LEGAL.value)
    return str(legality)


def _image_url(record: dict[str, Any]) -> str:
    image_uris = record.get("image_uris") or {}
    digital = image_uris.get("digital") or {}
    return str(digital.get("large", ""))


def parse_card(record: dict[str, Any]) -> Card:
    """
    Build a Card from a raw catalog record.

    Args:
        record: Raw record with id, name, version, cost, inkwell, ink, inks,
            keywords, type, classifications, text, lore, strength,
            willpower, legality and optionally maxAmount

    Returns:
        Card without requirements (see requirement_analyzer)

    Raises:
        CardParseError: If id, name or ink is missing
    """
    card_id = record.get("id")
    name = record.get("name")
    if not card_id or not name:
        raise CardParseError(card_id, "missing id or name")

    inks = tuple(record.get("inks") or ())
    ink = record.get("ink") or (inks[0] if inks else None)
    if not ink:
        raise CardParseError(card_id, "missing ink")

    rules_text = normalize_rules_text(record.get("text") or "")
    keywords = list(record.get("keywords") or [])

    max_copies = record.get("maxAmount")
    if max_copies is None:
        max_copies = UNLIMITED_MAX_COPIES if card_id == UNLIMITED_COPIES_ID else DEFAULT_MAX_COPIES

    return Card(
        id=card_id,
        name=name,
        version=record.get("version") or None,
        cost=int(record.get("cost") or 0),
        inkwell=bool(record.get("inkwell", False)),
        ink=ink,
        inks=inks or (ink,),
        keywords=parse_keywords(keywords, rules_text),
        card_types=tuple(record.get("type") or ()),
        classifications=tuple(record.get("classifications") or ()),
        rules_text=rules_text,
        sanitized_rules_text=sanitize_rules_text(rules_text, keywords),
        lore=int(record.get("lore") or 0),
        strength=int(record.get("strength") or 0),
        willpower=int(record.get("willpower") or 0),
        legality=_legality(record),
        max_copies=int(max_copies),
        image_url=_image_url(record),
    )


def parse_cards(records: list[dict[str, Any]]) -> list[Card]:
    """Parse a list of raw records, keeping the first record per card id."""
    cards: dict[str, Card] = {}
    for record in records:
        card = parse_card(record)
        cards.setdefault(card.id, card)
    return list(cards.values())
