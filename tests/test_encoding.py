from __future__ import annotations

import pytest

from michigan import encoding
from michigan.cards import Card, Suit


def test_card_id_round_trips_through_decode() -> None:
    identifier = encoding.card_id(12, Suit.CLUBS, copy=1)
    decoded = encoding.decode_id(identifier)

    assert decoded == encoding.CardDecoding(False, 12, Suit.CLUBS, 1)


def test_joker_ids_decode_as_jokers() -> None:
    red = encoding.card_from_id(encoding.joker_id(True))
    black = encoding.card_from_id(encoding.joker_id(False, copy=1))

    assert red == Card.joker(red=True)
    assert black == Card.joker(red=False)
    assert black.uid == encoding.CARDS_PER_DECK + encoding.JOKER_OFFSETS[1]


def test_double_deck_ids_are_unique() -> None:
    ids = encoding.deck_ids(2)

    assert len(ids) == 108
    assert len(set(ids)) == 108
    cards = encoding.cards_from_ids(ids)
    assert sum(card.is_joker for card in cards) == 4
    assert cards.count(Card(5, Suit.HEARTS)) == 2


@pytest.mark.parametrize(
    ("rank", "suit", "copy"),
    [
        (0, Suit.HEARTS, 0),
        (14, Suit.HEARTS, 0),
        (5, Suit.NONE, 0),
        (5, Suit.HEARTS, -1),
    ],
)
def test_card_id_validates_input(rank: int, suit: Suit, copy: int) -> None:
    with pytest.raises(ValueError):
        encoding.card_id(rank, suit, copy)


def test_deck_ids_without_jokers() -> None:
    assert len(encoding.deck_ids(1, jokers_per_deck=0)) == 52
    with pytest.raises(ValueError):
        encoding.deck_ids(1, jokers_per_deck=3)
