from __future__ import annotations

import random

import pytest

from michigan.bundles import BundleKind, CardRun, CardSet
from michigan.cards import Card, Suit, parse_cards
from michigan.rules import try_build

WILD = 9


def _set(*codes: str) -> CardSet:
    bundle = try_build(parse_cards(codes), WILD)
    assert isinstance(bundle, CardSet)
    return bundle


def _run(*codes: str) -> CardRun:
    bundle = try_build(parse_cards(codes), WILD, assume_order=True)
    assert isinstance(bundle, CardRun)
    return bundle


def test_bundle_kinds_are_tagged() -> None:
    assert _set("5S", "5H", "5D").kind is BundleKind.SET
    assert _run("4C", "5C", "6C").kind is BundleKind.RUN


def test_set_accepts_its_rank_and_wilds() -> None:
    bundle = _set("5S", "5H", "5D")

    assert bundle.can_add(Card(5, Suit.CLUBS))
    assert bundle.can_add(Card(WILD, Suit.CLUBS))
    assert bundle.can_add(Card.joker())
    assert not bundle.can_add(Card(6, Suit.SPADES))
    assert not bundle.add_card(Card(6, Suit.SPADES))
    assert len(bundle) == 3


def test_set_sheds_a_natural_while_another_remains() -> None:
    bundle = _set("5S", "5H", "JK", "BJ")

    shed = bundle.remove_one()

    assert shed == Card(5, Suit.SPADES)
    assert len(bundle) == 3


def test_set_sheds_a_wild_when_only_one_natural_is_left() -> None:
    bundle = _set("5S", "JK", "BJ", "9H")

    shed = bundle.remove_one()

    assert shed.is_joker
    assert bundle.non_wild_cards() == [Card(5, Suit.SPADES)]


def test_minimum_size_bundles_cannot_shed() -> None:
    with pytest.raises(ValueError):
        _set("5S", "5H", "5D").remove_one()
    with pytest.raises(ValueError):
        _run("4C", "5C", "6C").remove_one()


def test_set_swaps_in_a_wild() -> None:
    bundle = _set("5S", "5H", "5D")

    displaced = bundle.try_replace_with_wild(Card.joker())

    assert displaced == Card(5, Suit.SPADES)
    assert len(bundle) == 3
    assert bundle.cards[-1].is_joker


def test_set_with_one_natural_refuses_wild_swap() -> None:
    bundle = _set("5S", "JK", "9H")

    assert bundle.try_replace_with_wild(Card.joker(red=False)) is None


def test_run_extends_only_at_its_ends() -> None:
    bundle = _run("4C", "5C", "6C")

    assert bundle.can_add(Card(3, Suit.CLUBS))
    assert bundle.can_add(Card(7, Suit.CLUBS))
    assert not bundle.can_add(Card(8, Suit.CLUBS))
    assert not bundle.can_add(Card(7, Suit.HEARTS))

    assert bundle.add_card(Card(7, Suit.CLUBS))
    assert bundle.add_card(Card(3, Suit.CLUBS))
    assert (bundle.low, bundle.high) == (3, 7)
    assert [card.rank for card in bundle.cards] == [3, 4, 5, 6, 7]


def test_run_refuses_ambiguous_wild_without_mutation() -> None:
    bundle = _run("4C", "5C", "6C")

    assert not bundle.add_card(Card.joker())
    assert len(bundle) == 3
    assert (bundle.low, bundle.high) == (4, 6)


@pytest.mark.parametrize(("toward_max", "span"), [(True, (4, 7)), (False, (3, 6))])
def test_run_places_wild_in_requested_direction(toward_max: bool, span: tuple[int, int]) -> None:
    bundle = _run("4C", "5C", "6C")

    assert bundle.add_card(Card.joker(), toward_max)
    assert (bundle.low, bundle.high) == span
    assert bundle.high - bundle.low + 1 == len(bundle)


def test_run_wild_goes_to_the_only_open_end() -> None:
    low_run = _run("AS", "2S", "3S")
    high_run = _run("JH", "QH", "KH")

    assert low_run.add_card(Card.joker())
    assert high_run.add_card(Card.joker())
    assert (low_run.low, low_run.high) == (1, 4)
    assert (high_run.low, high_run.high) == (10, 13)
    assert high_run.cards[0].is_joker


def test_run_sheds_natural_ends_first() -> None:
    bundle = _run("JK", "5C", "6C", "7C")

    shed = bundle.remove_one()

    assert shed == Card(7, Suit.CLUBS)
    assert (bundle.low, bundle.high) == (4, 6)


def test_run_with_wild_ends_sheds_with_injected_rng() -> None:
    bundle = _run("JK", "5C", "6C", "BJ")
    assert (bundle.low, bundle.high) == (4, 7)

    twin = bundle.copy()

    shed = bundle.remove_one(random.Random(3))

    assert shed.is_joker
    assert len(bundle) == 3
    assert bundle.high - bundle.low + 1 == len(bundle)
    assert (bundle.low, bundle.high) in ((5, 7), (4, 6))
    assert twin.remove_one(random.Random(3)) == shed
    assert (twin.low, twin.high) == (bundle.low, bundle.high)


def test_run_swaps_first_natural_for_wild_in_place() -> None:
    bundle = _run("4C", "5C", "6C")

    displaced = bundle.try_replace_with_wild(Card.joker())

    assert displaced == Card(4, Suit.CLUBS)
    assert bundle.cards[0].is_joker
    assert (bundle.low, bundle.high) == (4, 6)


def test_copy_is_independent() -> None:
    bundle = _run("4C", "5C", "6C")
    clone = bundle.copy()

    clone.add_card(Card(7, Suit.CLUBS))

    assert len(bundle) == 3
    assert bundle.high == 6
    assert clone.high == 7
