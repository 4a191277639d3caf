"""Rule utilities and constants for Michigan."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Final, Sequence

from .bundles import MIN_BUNDLE_SIZE, Bundle, CardRun, CardSet
from .cards import ACE, KING, Card, is_wild

__all__ = [
    "FIRST_ROUND",
    "LAST_ROUND",
    "RoundGates",
    "DiscardWeights",
    "DEFAULT_ROUND_GATES",
    "DEFAULT_DISCARD_WEIGHTS",
    "DiscardUnavailable",
    "IllegalDraw",
    "wild_rank_for_round",
    "try_build",
]

FIRST_ROUND: Final[int] = 3
LAST_ROUND: Final[int] = 13


@dataclass(frozen=True, slots=True)
class RoundGates:
    """Rounds after which larger bundle combinations are considered."""

    pair_after: int = 5
    triple_after: int = 8
    quad_after: int = 11

    def max_group_size(self, round_number: int) -> int:
        """Return how many bundles one grouping may combine in ``round_number``."""

        size = 1
        for gate in (self.pair_after, self.triple_after, self.quad_after):
            if round_number > gate:
                size += 1
        return size


@dataclass(frozen=True, slots=True)
class DiscardWeights:
    """Potential scores awarded to leftover cards by the discard advisor."""

    same_rank: int = 6
    strong_run: int = 4
    weak_run: int = 3


DEFAULT_ROUND_GATES: Final[RoundGates] = RoundGates()
DEFAULT_DISCARD_WEIGHTS: Final[DiscardWeights] = DiscardWeights()


class DiscardUnavailable(RuntimeError):
    """Raised when the advisor is asked to discard from an all-wild leftover."""


class IllegalDraw(RuntimeError):
    """Raised when a card is requested from an exhausted pile."""


def wild_rank_for_round(round_number: int) -> int:
    if not ACE <= round_number <= KING:
        raise ValueError(f"round {round_number} has no wild rank")
    return round_number


def try_build(
    cards: Sequence[Card],
    wild_rank: int,
    assume_order: bool = False,
    rng: random.Random | None = None,
) -> Bundle | None:
    """Return the set or run formed by ``cards``, or ``None`` if they form neither.

    With ``assume_order`` the cards are taken in their played positions, so
    every wild stands exactly where it was put. Otherwise wilds first fill the
    interior gaps of a run and any spare wilds go to the open ends; when both
    ends are open the side is drawn from ``rng``.
    """

    cards = list(cards)
    if len(cards) < MIN_BUNDLE_SIZE:
        return None

    naturals = [card for card in cards if not is_wild(card, wild_rank)]
    if not naturals:
        return None

    set_value = naturals[0].rank
    if all(card.rank == set_value for card in naturals):
        return CardSet(cards, wild_rank, set_value)

    if assume_order:
        return _ordered_run(cards, wild_rank)
    wilds = [card for card in cards if is_wild(card, wild_rank)]
    return _unordered_run(naturals, wilds, wild_rank, rng)


def _ordered_run(cards: list[Card], wild_rank: int) -> CardRun | None:
    anchor_idx = next(idx for idx, card in enumerate(cards) if not is_wild(card, wild_rank))
    anchor = cards[anchor_idx]
    start = anchor.rank - anchor_idx
    end = anchor.rank
    for card in cards[anchor_idx + 1 :]:
        if is_wild(card, wild_rank) or (card.rank == end + 1 and card.suit == anchor.suit):
            end += 1
            continue
        return None

    if start < ACE or end > KING:
        return None
    return CardRun(cards, wild_rank, Card(start, anchor.suit), Card(end, anchor.suit))


def _unordered_run(
    naturals: list[Card],
    wilds: list[Card],
    wild_rank: int,
    rng: random.Random | None,
) -> CardRun | None:
    ordered = sorted(naturals, key=lambda card: card.rank)
    suit = ordered[0].suit
    holes = 0
    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.suit != suit or nxt.rank == prev.rank:
            return None
        holes += nxt.rank - prev.rank - 1
    if holes > len(wilds):
        return None

    spare = list(wilds)
    sequence = [ordered[0]]
    for prev, nxt in zip(ordered, ordered[1:]):
        for _ in range(nxt.rank - prev.rank - 1):
            sequence.append(spare.pop(0))
        sequence.append(nxt)

    start = ordered[0].rank
    end = start + len(sequence) - 1
    while spare:
        low_open = start > ACE
        high_open = end < KING
        if not (low_open or high_open):
            return None
        if low_open and high_open:
            toward_max = (rng or random.Random()).random() < 0.5
        else:
            toward_max = high_open
        wild = spare.pop(0)
        if toward_max:
            sequence.append(wild)
            end += 1
        else:
            sequence.insert(0, wild)
            start -= 1

    return CardRun(sequence, wild_rank, Card(start, suit), Card(end, suit))
