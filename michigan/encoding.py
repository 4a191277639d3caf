"""Card identifier encoding utilities for Michigan."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable

from .cards import ACE, JOKER_RANK, KING, Card, Suit

SUITS: Final[tuple[Suit, ...]] = Suit.playing()
CARDS_PER_DECK: Final[int] = 54
JOKER_OFFSETS: Final[tuple[int, int]] = (52, 53)


@dataclass(frozen=True, slots=True)
class CardDecoding:
    """Typed container describing a decoded card identifier."""

    is_joker: bool
    rank: int
    suit: Suit
    copy: int


def card_id(rank: int, suit: Suit, copy: int = 0) -> int:
    """Encode a ranked card and its deck copy into an identifier."""

    if not ACE <= rank <= KING:
        raise ValueError("rank out of range")
    if suit not in SUITS:
        raise ValueError(f"suit {suit!r} has no ranked cards")
    if copy < 0:
        raise ValueError("copy must be non-negative")
    return copy * CARDS_PER_DECK + SUITS.index(suit) * 13 + (rank - 1)


def joker_id(red: bool, copy: int = 0) -> int:
    if copy < 0:
        raise ValueError("copy must be non-negative")
    return copy * CARDS_PER_DECK + JOKER_OFFSETS[0 if red else 1]


def decode_id(card_identifier: int) -> CardDecoding:
    """Decode an identifier into its rank, suit and copy."""

    if card_identifier < 0:
        raise ValueError(f"card identifier {card_identifier} out of range")
    copy, base = divmod(card_identifier, CARDS_PER_DECK)
    if base in JOKER_OFFSETS:
        suit = Suit.HEARTS if base == JOKER_OFFSETS[0] else Suit.SPADES
        return CardDecoding(True, JOKER_RANK, suit, copy)
    suit_idx, rank_idx = divmod(base, 13)
    return CardDecoding(False, rank_idx + 1, SUITS[suit_idx], copy)


def card_from_id(card_identifier: int) -> Card:
    """Return the card for ``card_identifier``, using the id as its ``uid``."""

    decoded = decode_id(card_identifier)
    return Card(decoded.rank, decoded.suit, uid=card_identifier)


def deck_ids(decks: int, jokers_per_deck: int = 2) -> list[int]:
    """Return the identifiers of ``decks`` full decks in a fixed order."""

    if jokers_per_deck not in (0, 1, 2):
        raise ValueError("jokers_per_deck must be between 0 and 2")
    ids: list[int] = []
    for copy in range(decks):
        for suit in SUITS:
            for rank in range(ACE, KING + 1):
                ids.append(card_id(rank, suit, copy))
        for joker in range(jokers_per_deck):
            ids.append(joker_id(joker == 0, copy))
    return ids


def cards_from_ids(ids: Iterable[int]) -> list[Card]:
    return [card_from_id(int(identifier)) for identifier in ids]
