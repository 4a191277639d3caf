from __future__ import annotations

import random
from collections import Counter

import pytest

from michigan import tracker
from michigan.bundles import Bundle
from michigan.cards import Card, Suit, hand_score, parse_cards, stamp_instances
from michigan.rules import try_build
from michigan.tracker import BundleGroup, BundleTracker


def _keys(bundles: list[Bundle]) -> set[frozenset[int]]:
    return {frozenset(card.uid for card in bundle.cards) for bundle in bundles}


def _twelve_card_hand() -> list[Card]:
    return parse_cards(["2S", "2H", "2D", "3S", "3H", "3D", "4S", "4H", "4D", "6S", "6H", "6D"])


def test_groups_account_for_every_card() -> None:
    hand = parse_cards(["5S", "5H", "5D", "6S", "7S", "JK", "KD"])
    bundles = tracker.get_all_bundles(hand, 9, random.Random(1))

    groups = tracker.get_bundle_groups(hand, 9, bundles)

    assert groups
    for group in groups:
        used = Counter(card.uid for card in group.used_cards)
        unused = Counter(card.uid for card in group.unused_cards)
        assert used + unused == Counter(card.uid for card in hand)
        assert group.score == hand_score(group.unused_cards)


def test_groups_are_sorted_by_score() -> None:
    hand = _twelve_card_hand()
    groups = tracker.get_bundle_groups(hand, 13, tracker.get_all_bundles(hand, 13))

    scores = [group.score for group in groups]
    assert scores == sorted(scores)
    assert scores[0] == 0


def test_every_single_bundle_is_a_group() -> None:
    hand = _twelve_card_hand()
    bundles = tracker.get_all_bundles(hand, 13)

    groups = tracker.get_bundle_groups(hand, 3, bundles)

    assert len(groups) == len(bundles)
    assert all(len(group.bundles) == 1 for group in groups)


@pytest.mark.parametrize(("round_number", "largest"), [(4, 1), (7, 2), (9, 3), (12, 4)])
def test_group_size_is_gated_by_round(round_number: int, largest: int) -> None:
    hand = _twelve_card_hand()
    bundles = tracker.get_all_bundles(hand, 13)

    groups = tracker.get_bundle_groups(hand, round_number, bundles)

    assert max(len(group.bundles) for group in groups) == largest


def test_groups_never_reuse_a_card() -> None:
    hand = parse_cards(["5S", "5H", "5D", "6S", "7S"])
    bundles = tracker.get_all_bundles(hand, 9)

    groups = tracker.get_bundle_groups(hand, 13, bundles)

    for group in groups:
        tokens = [card.uid for card in group.used_cards]
        assert len(tokens) == len(set(tokens))
    assert all(len(group.bundles) == 1 for group in groups)


def test_new_bundles_all_contain_the_drawn_card() -> None:
    hand = parse_cards(["4C", "5C", "7C", "QD", "QS", "6C"])
    old_hand, drawn = hand[:-1], hand[-1]

    new = tracker.get_new_bundles(old_hand, drawn, 9)

    assert all(bundle.contains_instance(drawn) for bundle in new)
    expected = _keys(tracker.get_all_bundles(hand, 9)) - _keys(tracker.get_all_bundles(old_hand, 9))
    assert _keys(new) == expected


def test_new_bundles_for_a_duplicate_reuse_known_bundles() -> None:
    old_hand = parse_cards(["5S", "5H", "6S", "7S"])
    drawn = Card(5, Suit.SPADES, uid=40)
    known = tracker.get_all_bundles(old_hand, 9)

    derived = tracker.get_new_bundles(old_hand, drawn, 9, known)

    full = tracker.get_all_bundles([*old_hand, drawn], 9)
    assert _keys(derived) == _keys([bundle for bundle in full if bundle.contains_instance(drawn)])
    assert len(known) == 1
    assert known[0].contains_instance(old_hand[0])


def test_update_bundles_prunes_the_exact_instance() -> None:
    hand = parse_cards(["5S", "5S", "5H", "5D", "6S", "7S"])
    wild_rank = 9
    bundles = tracker.get_all_bundles(hand, wild_rank)
    discarded = hand[0]
    remaining = hand[1:]

    kept = tracker.update_bundles(bundles, discarded, True)

    assert kept
    assert len(kept) < len(bundles)
    remaining_tokens = {card.uid for card in remaining}
    for bundle in kept:
        assert not bundle.contains_instance(discarded)
        assert {card.uid for card in bundle.cards} <= remaining_tokens
        assert try_build(bundle.cards, wild_rank, assume_order=True) is not None


def test_update_bundles_by_value_without_tokens() -> None:
    cards = [Card(5, Suit.SPADES), Card(5, Suit.SPADES), Card(5, Suit.HEARTS), Card(6, Suit.SPADES),
             Card(7, Suit.SPADES)]
    bundles = tracker.get_all_bundles(cards, 9)
    both_copies = [bundle for bundle in bundles if bundle.cards.count(Card(5, Suit.SPADES)) == 2]
    assert both_copies

    kept_with_duplicate = tracker.update_bundles(bundles, Card(5, Suit.SPADES), True)
    kept_without = tracker.update_bundles(bundles, Card(5, Suit.SPADES), False)

    assert len(kept_with_duplicate) == len(bundles) - len(both_copies)
    assert all(Card(5, Suit.SPADES) not in bundle.cards for bundle in kept_without)


def _group(bundles: list[Bundle], unused: list[Card]) -> BundleGroup:
    used = [card for bundle in bundles for card in bundle.cards]
    return BundleGroup(bundles, used, unused, hand_score(unused))


def test_group_with_one_unused_card_goes_out_with_it() -> None:
    cards = parse_cards(["5S", "5H", "5D", "KC"])
    group = _group([try_build(cards[:3], 3)], [cards[3]])

    assert tracker.can_bundle_group_go_out(group, 3)
    assert tracker.get_group_discard(group, 3, 3) == Card(13, Suit.CLUBS)


def test_group_using_every_card_peels_from_a_large_bundle() -> None:
    cards = parse_cards(["5S", "5H", "5D", "5C"])
    tracked = try_build(cards, 3)
    group = _group([tracked], [])

    assert tracker.can_bundle_group_go_out(group, 3)
    discard = tracker.get_group_discard(group, 3, 3)

    assert discard.rank == 5
    assert len(group.bundles[0]) == 3
    assert group.unused_cards == [discard]
    assert len(tracked) == 4


def test_group_swaps_a_lone_wild_for_a_natural() -> None:
    cards = parse_cards(["5S", "5H", "5D", "JK"])
    group = _group([try_build(cards[:3], 3)], [cards[3]])

    discard = tracker.get_group_discard(group, 3, 3)

    assert discard == Card(5, Suit.SPADES)
    assert any(card.is_joker for card in group.bundles[0].cards)
    assert group.unused_cards == [discard]


def test_group_that_cannot_go_out_defers_to_advisor() -> None:
    cards = parse_cards(["5S", "5H", "5D", "KC", "2D", "3D"])
    group = _group([try_build(cards[:3], 9)], cards[3:])

    assert not tracker.can_bundle_group_go_out(group, 5)
    assert tracker.get_group_discard(group, 5, 9) == Card(13, Suit.CLUBS)


def test_tracker_matches_full_enumeration_through_a_turn() -> None:
    hand = stamp_instances(parse_cards(["4C", "5C", "7C", "QD", "QS", "6C", "QH"]))
    bundle_tracker = BundleTracker(6, rng=random.Random(5))
    bundle_tracker.deal(hand[:6])

    bundle_tracker.draw(hand[6])
    assert _keys(bundle_tracker.bundles) == _keys(tracker.get_all_bundles(bundle_tracker.hand, 6))

    bundle_tracker.discard(hand[1])
    assert _keys(bundle_tracker.bundles) == _keys(tracker.get_all_bundles(bundle_tracker.hand, 6))
    assert len(bundle_tracker.hand) == 6
    assert bundle_tracker.best_group() is not None


def test_tracker_draw_of_a_duplicate_keeps_bundles_complete() -> None:
    cards = parse_cards(["5S", "5H", "6S", "7S", "KD", "5S"])
    bundle_tracker = BundleTracker(4, rng=random.Random(2))
    bundle_tracker.deal(cards[:5])

    new = bundle_tracker.draw(cards[5])

    assert all(bundle.contains_instance(cards[5]) for bundle in new)
    assert _keys(bundle_tracker.bundles) == _keys(tracker.get_all_bundles(bundle_tracker.hand, 4))


def test_tracker_choose_discard_prefers_going_out() -> None:
    cards = parse_cards(["5S", "5H", "5D", "KC"])
    bundle_tracker = BundleTracker(3, rng=random.Random(0))
    bundle_tracker.deal(cards)

    assert bundle_tracker.going_out_group() is not None
    assert bundle_tracker.choose_discard() == Card(13, Suit.CLUBS)


def test_tracker_without_bundles_uses_whole_hand() -> None:
    bundle_tracker = BundleTracker(3)
    bundle_tracker.deal(parse_cards(["2S", "7H", "KD", "JK"]))

    assert bundle_tracker.best_group() is None
    assert bundle_tracker.choose_discard() == Card(13, Suit.DIAMONDS)
