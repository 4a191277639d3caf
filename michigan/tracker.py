"""Incremental bundle tracking across the turns of a round.

The full subset enumeration is exponential in hand size, so it runs once per
deal. Each draw only enumerates subsets that include the drawn card and each
discard prunes the bundles that relied on the card that left the hand.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from itertools import combinations
from typing import Sequence

from .bundles import MIN_BUNDLE_SIZE, Bundle
from .cards import Card, hand_score, index_of_instance, is_wild, remove_instance
from .evaluation import find_best_discard
from .rules import DEFAULT_DISCARD_WEIGHTS, DEFAULT_ROUND_GATES, DiscardWeights, RoundGates, try_build
from .search import enumerate_candidates

__all__ = [
    "BundleGroup",
    "BundleTracker",
    "get_all_bundles",
    "get_new_bundles",
    "get_bundle_groups",
    "update_bundles",
    "can_bundle_group_go_out",
    "get_group_discard",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BundleGroup:
    """Disjoint tracked bundles the hand can hold at the same time."""

    bundles: list[Bundle]
    used_cards: list[Card]
    unused_cards: list[Card]
    score: int


def get_all_bundles(hand: Sequence[Card], wild_rank: int, rng: random.Random | None = None) -> list[Bundle]:
    return [candidate.bundle for candidate in enumerate_candidates(hand, wild_rank, rng)]


def _find_twin(cards: Sequence[Card], card: Card) -> Card | None:
    return next((existing for existing in cards if existing == card), None)


def _substitute(bundle: Bundle, twin: Card, card: Card) -> Bundle:
    swapped = bundle.copy()
    for idx, existing in enumerate(swapped.cards):
        if existing.same_instance(twin):
            swapped.cards[idx] = card
            break
    return swapped


def get_new_bundles(
    hand_without_card: Sequence[Card],
    new_card: Card,
    wild_rank: int,
    known: Sequence[Bundle] | None = None,
    rng: random.Random | None = None,
) -> list[Bundle]:
    """Return the bundles that become possible once ``new_card`` joins the hand.

    Only subsets containing ``new_card`` are built. If a natural copy of the
    same card is already held and ``known`` lists every bundle of the hand
    without ``new_card``, the new bundles are the known ones holding that copy
    with ``new_card`` swapped in, plus the sets that need both copies.
    """

    twin = None if is_wild(new_card, wild_rank) else _find_twin(hand_without_card, new_card)
    if twin is not None and known is not None:
        derived = [_substitute(bundle, twin, new_card) for bundle in known if bundle.contains_instance(twin)]
        partners = [
            card
            for card in hand_without_card
            if not card.same_instance(twin) and (card.rank == new_card.rank or is_wild(card, wild_rank))
        ]
        for size in range(MIN_BUNDLE_SIZE - 2, len(partners) + 1):
            for combo in combinations(partners, size):
                bundle = try_build([twin, *combo, new_card], wild_rank, False, rng)
                if bundle is not None:
                    derived.append(bundle)
        logger.debug("derived %d bundle(s) for duplicate %s", len(derived), new_card)
        return derived

    others = list(hand_without_card)
    found: list[Bundle] = []
    for size in range(MIN_BUNDLE_SIZE - 1, len(others) + 1):
        for combo in combinations(others, size):
            bundle = try_build([*combo, new_card], wild_rank, False, rng)
            if bundle is not None:
                found.append(bundle)
    logger.debug("%d new bundle(s) with %s", len(found), new_card)
    return found


def _take(cards: Sequence[Card], needed: Sequence[Card]) -> list[Card] | None:
    remaining = list(cards)
    for card in needed:
        try:
            remove_instance(remaining, card)
        except ValueError:
            return None
    return remaining


def _make_group(bundles: Sequence[Bundle], unused: list[Card]) -> BundleGroup:
    used = [card for bundle in bundles for card in bundle.cards]
    return BundleGroup(list(bundles), used, unused, hand_score(unused))


def get_bundle_groups(
    hand: Sequence[Card],
    round_number: int,
    bundles: Sequence[Bundle],
    gates: RoundGates = DEFAULT_ROUND_GATES,
) -> list[BundleGroup]:
    """Return every disjoint combination of ``bundles`` the hand supports.

    Combinations hold at most ``gates.max_group_size(round_number)`` bundles.
    A combination that needs a card twice fails the removal check and is
    left out. Groups are ordered by the points they leave unused.
    """

    limit = gates.max_group_size(round_number)
    groups: list[BundleGroup] = []

    def extend(start: int, chosen: list[Bundle], remaining: list[Card]) -> None:
        for idx in range(start, len(bundles)):
            rest = _take(remaining, bundles[idx].cards)
            if rest is None:
                continue
            combo = chosen + [bundles[idx]]
            groups.append(_make_group(combo, rest))
            if len(combo) < limit:
                extend(idx + 1, combo, rest)

    extend(0, [], list(hand))
    groups.sort(key=lambda group: group.score)
    logger.debug("%d group(s) from %d bundle(s), up to %d per group", len(groups), len(bundles), limit)
    return groups


def update_bundles(bundles: Sequence[Bundle], discarded: Card, hand_still_contains_duplicate: bool) -> list[Bundle]:
    """Drop the bundles that can no longer be held after ``discarded`` leaves."""

    if discarded.uid is not None:
        kept = [bundle for bundle in bundles if not bundle.contains_instance(discarded)]
    elif not hand_still_contains_duplicate:
        kept = [bundle for bundle in bundles if discarded not in bundle.cards]
    else:
        kept = [bundle for bundle in bundles if bundle.cards.count(discarded) < 2]
    logger.debug("discarding %s pruned %d bundle(s)", discarded, len(bundles) - len(kept))
    return kept


def can_bundle_group_go_out(group: BundleGroup, round_number: int) -> bool:
    used = len(group.used_cards)
    if used == round_number and len(group.unused_cards) == 1:
        return True
    return used == round_number + 1 and any(len(bundle) > MIN_BUNDLE_SIZE for bundle in group.bundles)


def get_group_discard(
    group: BundleGroup,
    round_number: int,
    wild_rank: int,
    rng: random.Random | None = None,
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS,
) -> Card:
    """Return the card to discard when playing ``group``.

    A going-out group sheds its single unused card, swapping a wild into a
    bundle first when one will take it, or peels a card from an over-sized
    bundle. ``group`` is updated to the bundles actually laid down; the
    tracked bundles it came from are never modified.
    """

    if can_bundle_group_go_out(group, round_number):
        if len(group.unused_cards) == 1:
            lone = group.unused_cards[0]
            if is_wild(lone, wild_rank):
                for idx, bundle in enumerate(group.bundles):
                    trial = bundle.copy()
                    displaced = trial.try_replace_with_wild(lone)
                    if displaced is not None:
                        group.bundles[idx] = trial
                        remove_instance(group.used_cards, displaced)
                        group.used_cards.append(lone)
                        group.unused_cards = [displaced]
                        group.score = hand_score(group.unused_cards)
                        return displaced
            return lone
        for idx, bundle in enumerate(group.bundles):
            if len(bundle) > MIN_BUNDLE_SIZE:
                trial = bundle.copy()
                shed = trial.remove_one(rng)
                group.bundles[idx] = trial
                remove_instance(group.used_cards, shed)
                group.unused_cards = [shed]
                group.score = hand_score(group.unused_cards)
                return shed
    return find_best_discard(group.unused_cards, wild_rank, weights)


@dataclass(slots=True)
class BundleTracker:
    """Bundles and groupings of one player's hand, maintained turn by turn.

    A tracker belongs to one hand; callers run ``draw`` then ``discard`` in
    turn order and never share it between threads.
    """

    round_number: int
    gates: RoundGates = DEFAULT_ROUND_GATES
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS
    rng: random.Random = field(default_factory=random.Random)
    hand: list[Card] = field(default_factory=list)
    bundles: list[Bundle] = field(default_factory=list)
    groups: list[BundleGroup] = field(default_factory=list)

    @property
    def wild_rank(self) -> int:
        return self.round_number

    def deal(self, cards: Sequence[Card]) -> None:
        self.hand = list(cards)
        self.bundles = get_all_bundles(self.hand, self.wild_rank, self.rng)
        self._regroup()

    def draw(self, card: Card) -> list[Bundle]:
        """Add ``card`` to the hand and return the bundles it made possible."""

        new = get_new_bundles(self.hand, card, self.wild_rank, self.bundles, self.rng)
        self.hand.append(card)
        self.bundles.extend(new)
        self._regroup()
        return new

    def discard(self, card: Card) -> Card:
        """Remove this instance of ``card`` from the hand and prune."""

        removed = self.hand.pop(index_of_instance(self.hand, card))
        duplicate_left = removed in self.hand
        self.bundles = update_bundles(self.bundles, removed, duplicate_left)
        self._regroup()
        return removed

    def best_group(self) -> BundleGroup | None:
        return self.groups[0] if self.groups else None

    def going_out_group(self) -> BundleGroup | None:
        return next((group for group in self.groups if can_bundle_group_go_out(group, self.round_number)), None)

    def choose_discard(self) -> Card:
        """Pick a discard from the best grouping, or from the whole hand."""

        group = self.going_out_group() or self.best_group()
        if group is None:
            return find_best_discard(self.hand, self.wild_rank, self.weights)
        return get_group_discard(group, self.round_number, self.wild_rank, self.rng, self.weights)

    def _regroup(self) -> None:
        self.groups = get_bundle_groups(self.hand, self.round_number, self.bundles, self.gates)
