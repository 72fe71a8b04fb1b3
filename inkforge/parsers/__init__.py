from inkforge.parsers.lorcast import (
    CardParseError,
    parse_card,
    parse_cards,
    parse_keywords,
    sanitize_rules_text,
)

__all__ = [
    "CardParseError",
    "parse_card",
    "parse_cards",
    "parse_keywords",
    "sanitize_rules_text",
]
