"""Card abstractions and helpers for Michigan."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from itertools import count
from typing import Iterable, Sequence

JOKER_RANK = 0
ACE = 1
KING = 13
RANK_LABELS = {0: "JK", 1: "A", 11: "J", 12: "Q", 13: "K"}
RANK_NAMES = {0: "Joker", 1: "A", 11: "J", 12: "Q", 13: "K"}


class Suit(str, Enum):
    """Enumeration of card suits; ``NONE`` only ever appears on jokers."""

    NONE = "-"
    HEARTS = "H"
    DIAMONDS = "D"
    SPADES = "S"
    CLUBS = "C"

    @classmethod
    def playing(cls) -> tuple["Suit", ...]:
        """Return the four suits used by ranked cards, in deck order."""

        return (cls.SPADES, cls.HEARTS, cls.CLUBS, cls.DIAMONDS)

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a card.

    Equality is by ``(rank, suit)``. ``uid`` is an optional instance token
    that distinguishes the two physical copies of a card in a double deck; it
    never takes part in comparisons.
    """

    rank: int
    suit: Suit
    uid: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not JOKER_RANK <= self.rank <= KING:
            raise ValueError(f"rank {self.rank} out of range")

    @property
    def is_joker(self) -> bool:
        return self.rank == JOKER_RANK

    @classmethod
    def joker(cls, red: bool = True, uid: int | None = None) -> "Card":
        return cls(JOKER_RANK, Suit.HEARTS if red else Suit.SPADES, uid)

    @classmethod
    def parse(cls, code: str) -> "Card":
        """Parse a short code such as ``"10H"``, ``"QS"`` or ``"RJ"``."""

        text = code.strip().upper()
        if text in ("RJ", "JK", "JOKER"):
            return cls.joker(red=True)
        if text == "BJ":
            return cls.joker(red=False)
        if len(text) < 2:
            raise ValueError(f"invalid card code '{code}'")
        face, suit_code = text[:-1], text[-1]
        try:
            suit = Suit(suit_code)
        except ValueError as exc:
            raise ValueError(f"invalid suit in card code '{code}'") from exc
        if suit is Suit.NONE:
            raise ValueError(f"invalid suit in card code '{code}'")
        lookup = {label: rank for rank, label in RANK_LABELS.items() if rank != JOKER_RANK}
        if face in lookup:
            return cls(lookup[face], suit)
        if face.isdigit() and 2 <= int(face) <= 10:
            return cls(int(face), suit)
        raise ValueError(f"invalid rank in card code '{code}'")

    def label(self) -> str:
        """Return the short code for the card (the inverse of :meth:`parse`)."""

        if self.is_joker:
            return "RJ" if self.suit.is_red else "BJ"
        return f"{RANK_LABELS.get(self.rank, str(self.rank))}{self.suit.value}"

    def same_instance(self, other: "Card") -> bool:
        """Return ``True`` when ``other`` is this exact physical card."""

        return self == other and self.uid == other.uid

    def __str__(self) -> str:
        if self.is_joker:
            return f"[{'Red' if self.suit.is_red else 'Black'} Joker]"
        return f"[{RANK_NAMES.get(self.rank, str(self.rank))} of {self.suit.name.title()}]"


def score_value(card: Card) -> int:
    """Return the penalty points a card is worth when left in hand."""

    if card.rank > 10:
        return 10
    return card.rank


def is_wild(card: Card, wild_rank: int) -> bool:
    """Jokers and every card of the round's wild rank are wild."""

    return card.rank == JOKER_RANK or card.rank == wild_rank


def hand_score(cards: Iterable[Card]) -> int:
    return sum(score_value(card) for card in cards)


def parse_cards(codes: Iterable[str]) -> list[Card]:
    """Parse codes into cards carrying distinct instance tokens."""

    return stamp_instances(Card.parse(code) for code in codes)


def stamp_instances(cards: Iterable[Card], start: int = 0) -> list[Card]:
    """Return ``cards`` with a fresh, unique ``uid`` on every card."""

    tokens = count(start)
    return [replace(card, uid=next(tokens)) for card in cards]


def index_of_instance(cards: Sequence[Card], card: Card) -> int:
    """Return the position of ``card`` in ``cards`` matching its instance.

    Cards without a token fall back to the first value-equal entry.
    """

    for idx, candidate in enumerate(cards):
        if candidate.same_instance(card):
            return idx
    if card.uid is None:
        for idx, candidate in enumerate(cards):
            if candidate == card:
                return idx
    raise ValueError(f"card {card} not present")


def remove_instance(cards: list[Card], card: Card) -> Card:
    """Remove and return the specific instance of ``card`` from ``cards``."""

    return cards.pop(index_of_instance(cards, card))


def sort_by_rank(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: c.rank)


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.label() for card in cards)
