"""
Card model.

A Card is one catalog entry plus the flags derived from it. Cards are frozen:
the requirement analyzer produces new Card values instead of mutating them.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum


class Ink(str, Enum):
    """The six card colors."""

    AMBER = "Amber"
    AMETHYST = "Amethyst"
    EMERALD = "Emerald"
    RUBY = "Ruby"
    SAPPHIRE = "Sapphire"
    STEEL = "Steel"


class Legality(str, Enum):
    LEGAL = "legal"
    BANNED = "banned"
    NOT_LEGAL = "not_legal"
    UNRELEASED = "unreleased"


# Card types as printed on the catalog records
CHARACTER = "Character"
ACTION = "Action"
ITEM = "Item"
LOCATION = "Location"
SONG = "Song"

CARD_TYPE_ORDER = (CHARACTER, ACTION, ITEM, LOCATION)

# Keywords the deck builder understands
BODYGUARD = "Bodyguard"
CHALLENGER = "Challenger"
EVASIVE = "Evasive"
RECKLESS = "Reckless"
RESIST = "Resist"
RUSH = "Rush"
SHIFT = "Shift"
SINGER = "Singer"
WARD = "Ward"

KNOWN_KEYWORDS: tuple[str, ...] = (
    WARD,
    EVASIVE,
    BODYGUARD,
    RESIST,
    SINGER,
    SHIFT,
    RECKLESS,
    CHALLENGER,
    RUSH,
)

# Morph can be the base of any Shift character
ANY_SHIFT_TARGET_ID = "crd_be70d689335140bdadcde5f5356e169d"

# Dalmatian Puppy may be played in any number
UNLIMITED_COPIES_ID = "crd_97f8be5e176144378d58823c6f9c29c7"

DEFAULT_MAX_COPIES = 4
UNLIMITED_MAX_COPIES = 60


@dataclass(frozen=True, slots=True)
class Keywords:
    """
    Keyword abilities of a card.

    Maps each keyword tag to its printed amount (e.g. Resist +2 -> 2).
    Keywords without an amount map to None.
    """

    entries: tuple[tuple[str, int | None], ...] = ()

    @classmethod
    def from_mapping(cls, amounts: dict[str, int | None]) -> "Keywords":
        return cls(entries=tuple(sorted(amounts.items())))

    def __contains__(self, keyword: object) -> bool:
        return any(tag == keyword for tag, _ in self.entries)

    def __iter__(self) -> Iterator[str]:
        return (tag for tag, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def amount(self, keyword: str) -> int:
        """Printed amount for a keyword, 0 if absent or amount-less."""
        for tag, value in self.entries:
            if tag == keyword:
                return value or 0
        return 0


@dataclass(frozen=True, slots=True)
class Requirements:
    """
    What else must be in a deck for a card to make sense there.

    Filled in once by the requirement analyzer.
    """

    keywords: frozenset[str] = frozenset()
    classifications: frozenset[str] = frozenset()
    card_types: frozenset[str] = frozenset()
    card_names: frozenset[str] = frozenset()

    def is_empty(self) -> bool:
        return not (self.keywords or self.classifications or self.card_types or self.card_names)


def split_name(name: str) -> tuple[str, ...]:
    """Split a dual name ("Chip & Dale") into its trimmed segments."""
    return tuple(part.strip() for part in name.split("&"))


@dataclass(frozen=True, slots=True)
class Card:
    """
    A single catalog card.

    Attributes:
        id: Stable catalog identifier
        name: Card name (several versions may share it)
        version: Version subtitle, if any
        cost: Ink cost to play
        inkwell: Whether the card can be put into the inkwell
        ink: Primary ink
        inks: All inks the card needs (1 or 2)
        keywords: Keyword abilities with amounts
        card_types: Character, Action, Item, Location, Song
        classifications: Tribal tags (Storyborn, Hero, Pirate, ...)
        rules_text: Printed rules text
        sanitized_rules_text: Lower-cased rules text without reminder text
            or keyword reprints, used for dependency inference and weighting
        lore: Lore gained when questing
        strength: Strength stat
        willpower: Willpower stat
        legality: Tournament legality
        max_copies: Copy cap per deck
        image_url: Card art, for renderers
        requirements: Inferred dependencies on the rest of the deck
    """

    id: str
    name: str
    cost: int
    ink: str
    version: str | None = None
    inkwell: bool = False
    inks: tuple[str, ...] = ()
    keywords: Keywords = field(default_factory=Keywords)
    card_types: tuple[str, ...] = ()
    classifications: tuple[str, ...] = ()
    rules_text: str = ""
    sanitized_rules_text: str = ""
    lore: int = 0
    strength: int = 0
    willpower: int = 0
    legality: str = Legality.LEGAL.value
    max_copies: int = DEFAULT_MAX_COPIES
    image_url: str = ""
    requirements: Requirements = field(default_factory=Requirements)

    def __post_init__(self) -> None:
        if not self.inks:
            object.__setattr__(self, "inks", (self.ink,))

    @property
    def title(self) -> str:
        """Display and grouping key."""
        return f"{self.name} - {self.version}" if self.version else self.name

    @property
    def name_segments(self) -> tuple[str, ...]:
        return split_name(self.name)

    @property
    def is_legal(self) -> bool:
        return self.legality == Legality.LEGAL.value

    @property
    def is_character(self) -> bool:
        return CHARACTER in self.card_types

    @property
    def is_song(self) -> bool:
        return SONG in self.card_types

    @property
    def has_shift(self) -> bool:
        return SHIFT in self.keywords

    @property
    def has_singer(self) -> bool:
        return SINGER in self.keywords

    @property
    def sing_cost(self) -> int:
        """Cost of songs this character can sing (Singer overrides cost)."""
        if self.has_singer and self.keywords.amount(SINGER):
            return self.keywords.amount(SINGER)
        return self.cost

    # ------------------------------------------------------------------
    # Dependency predicates
    # ------------------------------------------------------------------

    def others_in(self, deck: Iterable["Card"]) -> list["Card"]:
        """Cards of a deck that are not this card."""
        return [card for card in deck if card.id != self.id]

    def deck_meets_requirements(self, deck: Iterable["Card"]) -> bool:
        """True if the rest of the deck satisfies every dependency of this card."""
        others = self.others_in(deck)

        return (
            self.deck_meets_required_keywords(others)
            and self.deck_meets_required_classifications(others)
            and self.deck_meets_required_card_types(others)
            and self.deck_meets_required_card_names(others)
            and self.deck_meets_shift_requirements(others)
        )

    def deck_meets_required_keywords(self, others: Sequence["Card"]) -> bool:
        if not self.requirements.keywords:
            return True
        present = {tag for card in others for tag in card.keywords}
        return self.requirements.keywords <= present

    def deck_meets_required_classifications(self, others: Sequence["Card"]) -> bool:
        if not self.requirements.classifications:
            return True
        present = {tag for card in others for tag in card.classifications}
        return bool(self.requirements.classifications & present)

    def deck_meets_required_card_types(self, others: Sequence["Card"]) -> bool:
        if not self.requirements.card_types:
            return True
        present = {card_type for card in others for card_type in card.card_types}
        return self.requirements.card_types <= present

    def deck_meets_required_card_names(self, others: Sequence["Card"]) -> bool:
        required = self.requirements.card_names
        if self.has_shift:
            # Own name segments are shift targets, checked by the shift predicate
            required = required - set(self.name_segments)
        if not required:
            return True
        present = {segment for card in others for segment in (card.name, *card.name_segments)}
        return bool(required & present)

    def deck_meets_shift_requirements(self, others: Iterable["Card"]) -> bool:
        """
        A Shift card needs something to shift onto.

        Satisfied by the universal shift target or by a cheaper card
        sharing one of this card's name segments.
        """
        if not self.has_shift:
            return True

        others = self.others_in(others)
        if any(card.id == ANY_SHIFT_TARGET_ID for card in others):
            return True

        names = set(self.name_segments)
        return any(
            card.cost < self.cost and names.intersection(card.name_segments) for card in others
        )

    def can_shift_from(self, other: "Card") -> bool:
        """True if this Shift card can be played on top of `other`."""
        if not self.has_shift:
            return False
        if other.id == ANY_SHIFT_TARGET_ID:
            return True
        return bool(set(self.name_segments).intersection(other.name_segments))

    def satisfies_requirements_of(self, deck: Iterable["Card"]) -> bool:
        """True if this card provides something another deck card depends on."""
        keywords: set[str] = set()
        classifications: set[str] = set()
        card_types: set[str] = set()
        card_names: set[str] = set()
        for card in self.others_in(deck):
            keywords |= card.requirements.keywords
            classifications |= card.requirements.classifications
            card_types |= card.requirements.card_types
            card_names |= card.requirements.card_names
        needed = Requirements(
            keywords=frozenset(keywords),
            classifications=frozenset(classifications),
            card_types=frozenset(card_types),
            card_names=frozenset(card_names),
        )

        return (
            any(tag in needed.keywords for tag in self.keywords)
            or any(tag in needed.classifications for tag in self.classifications)
            or any(card_type in needed.card_types for card_type in self.card_types)
            or any(name in needed.card_names for name in (self.name, *self.name_segments))
        )
