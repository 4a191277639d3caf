"""Best-play search over every bundle a hand can form."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Iterator, Sequence, cast

from .bundles import MIN_BUNDLE_SIZE, Bundle, BundleKind, CardRun
from .cards import Card, format_cards, is_wild, score_value, sort_by_rank
from .rules import try_build

__all__ = [
    "MAX_CHOSEN_BUNDLES",
    "Play",
    "Candidate",
    "leftover_score",
    "enumerate_candidates",
    "find_best_play",
    "find_best_play_with_open_bundles",
]

logger = logging.getLogger(__name__)

MAX_CHOSEN_BUNDLES = 4


@dataclass(slots=True)
class Play:
    """Outcome of a search: bundles to lay down and the cards left over.

    ``bundle_plays`` and ``extended_bundles`` are parallel to the open bundles
    the search was given and stay empty for a plain search.
    """

    bundles: list[Bundle]
    leftover: list[Card]
    bundle_plays: list[list[Card]] = field(default_factory=list)
    extended_bundles: list[Bundle] = field(default_factory=list)

    @property
    def goes_out(self) -> bool:
        return len(self.leftover) == 1

    @property
    def score(self) -> int:
        return leftover_score(self.leftover)


@dataclass(frozen=True, slots=True)
class Candidate:
    """A bundle together with the hand positions it consumes."""

    bundle: Bundle
    positions: frozenset[int]

    def __len__(self) -> int:
        return len(self.positions)


def leftover_score(cards: Iterable[Card]) -> int:
    """Points left in hand once the highest-ranked card has been discarded."""

    ordered = sort_by_rank(cards)
    return sum(score_value(card) for card in ordered[:-1])


def enumerate_candidates(
    hand: Sequence[Card],
    wild_rank: int,
    rng: random.Random | None = None,
) -> list[Candidate]:
    """Return every bundle buildable from ``hand``, largest first."""

    positions = range(len(hand))
    found: list[Candidate] = []
    for size in range(MIN_BUNDLE_SIZE, len(hand) + 1):
        for combo in combinations(positions, size):
            bundle = try_build([hand[idx] for idx in combo], wild_rank, False, rng)
            if bundle is not None:
                found.append(Candidate(bundle, frozenset(combo)))
    found.sort(key=len, reverse=True)
    return found


def _go_out(bundles: Sequence[Bundle], last: Card, wild_rank: int) -> Play:
    chosen = [bundle.copy() for bundle in bundles]
    if is_wild(last, wild_rank):
        for bundle in chosen:
            displaced = bundle.try_replace_with_wild(last)
            if displaced is not None:
                last = displaced
                break
    return Play(chosen, [last])


def find_best_play(hand: Sequence[Card], wild_rank: int, rng: random.Random | None = None) -> Play:
    """Return the bundles leaving the fewest points in ``hand``.

    A play whose leftover is a single card goes out; that card is the
    discard.
    """

    hand = list(hand)
    size = len(hand)
    candidates = enumerate_candidates(hand, wild_rank, rng)
    logger.debug("best play for %s, wild %d: %d candidate bundle(s)", format_cards(hand), wild_rank, len(candidates))
    if not candidates:
        return Play([], hand)

    whole = next((c for c in candidates if len(c) == size and size > MIN_BUNDLE_SIZE), None)
    if whole is not None:
        bundle = whole.bundle.copy()
        shed = bundle.remove_one(rng)
        logger.debug("whole hand bundles; shedding %s", shed)
        return Play([bundle], [shed])

    nearly = next((c for c in candidates if len(c) == size - 1), None)
    if nearly is not None:
        last = next(card for idx, card in enumerate(hand) if idx not in nearly.positions)
        return _go_out([nearly.bundle], last, wild_rank)

    best: Play | None = None
    best_score = None
    for start in candidates:
        if len(start) >= size:
            continue
        chosen = [start]
        used = set(start.positions)
        for _ in range(MAX_CHOSEN_BUNDLES - 1):
            remaining_count = size - len(used)
            follow = next(
                (c for c in candidates if used.isdisjoint(c.positions) and len(c) < remaining_count),
                None,
            )
            if follow is None:
                break
            chosen.append(follow)
            used.update(follow.positions)

        remaining = [card for idx, card in enumerate(hand) if idx not in used]
        if len(remaining) == 1:
            logger.debug("going out with %d bundle(s)", len(chosen))
            return _go_out([c.bundle for c in chosen], remaining[0], wild_rank)

        score = leftover_score(remaining)
        if best_score is None or score < best_score:
            best_score = score
            best = Play([c.bundle for c in chosen], sort_by_rank(remaining))

    if best is None:
        return Play([], hand)
    return best


@dataclass(frozen=True, slots=True)
class _BundlePlay:
    bundle_index: int
    positions: tuple[int, ...]
    result: Bundle


def _placements(bundle: Bundle, card: Card) -> Iterator[Bundle]:
    if bundle.kind is BundleKind.RUN and bundle.is_wild(card):
        for toward_max in (True, False):
            trial = bundle.copy()
            if trial.add_card(card, toward_max):
                yield trial
        return
    trial = bundle.copy()
    if trial.add_card(card):
        yield trial


def _set_plays(index: int, bundle: Bundle, hand: Sequence[Card]) -> list[_BundlePlay]:
    accepted = [idx for idx, card in enumerate(hand) if bundle.can_add(card)]
    plays: list[_BundlePlay] = []
    for size in range(1, len(accepted) + 1):
        for combo in combinations(accepted, size):
            result = bundle.copy()
            for idx in combo:
                result.add_card(hand[idx])
            plays.append(_BundlePlay(index, combo, result))
    return plays


def _run_plays(index: int, bundle: CardRun, hand: Sequence[Card]) -> list[_BundlePlay]:
    queue: deque[tuple[tuple[int, ...], CardRun]] = deque()
    seen_states: set[tuple[frozenset[int], int, int]] = set()

    def push(positions: tuple[int, ...], placed: Bundle) -> None:
        state = cast(CardRun, placed)
        key = (frozenset(positions), state.low, state.high)
        if key not in seen_states:
            seen_states.add(key)
            queue.append((positions, state))

    for idx, card in enumerate(hand):
        if bundle.can_add(card):
            for placed in _placements(bundle, card):
                push((idx,), placed)

    plays: list[_BundlePlay] = []
    recorded: set[frozenset[int]] = set()
    while queue:
        positions, state = queue.popleft()
        card_set = frozenset(positions)
        if card_set not in recorded:
            recorded.add(card_set)
            plays.append(_BundlePlay(index, positions, state))
        for idx, card in enumerate(hand):
            if idx in card_set or not state.can_add(card):
                continue
            for placed in _placements(state, card):
                push(positions + (idx,), placed)
    return plays


def _isolated_plays(hand: Sequence[Card], open_bundles: Sequence[Bundle]) -> list[_BundlePlay]:
    plays: list[_BundlePlay] = []
    for index, bundle in enumerate(open_bundles):
        if bundle.kind is BundleKind.RUN:
            plays.extend(_run_plays(index, cast(CardRun, bundle), hand))
        else:
            plays.extend(_set_plays(index, bundle, hand))
    return plays


def _mixed_plays(hand: Sequence[Card], open_bundles: Sequence[Bundle]) -> list[tuple[_BundlePlay, ...]]:
    isolated = _isolated_plays(hand, open_bundles)
    combos: list[tuple[_BundlePlay, ...]] = [(play,) for play in isolated]
    seen = {((play.bundle_index, frozenset(play.positions)),) for play in isolated}
    frontier = list(combos)
    for _ in range(len(open_bundles) - 1):
        merged_round: list[tuple[_BundlePlay, ...]] = []
        for combo in frontier:
            touched = {play.bundle_index for play in combo}
            used = {idx for play in combo for idx in play.positions}
            for play in isolated:
                if play.bundle_index in touched or not used.isdisjoint(play.positions):
                    continue
                merged = tuple(sorted(combo + (play,), key=lambda p: p.bundle_index))
                key = tuple((p.bundle_index, frozenset(p.positions)) for p in merged)
                if key in seen:
                    continue
                seen.add(key)
                merged_round.append(merged)
        combos.extend(merged_round)
        frontier = merged_round
    logger.debug("%d isolated and %d total bundle play(s)", len(isolated), len(combos))
    return combos


def find_best_play_with_open_bundles(
    hand: Sequence[Card],
    wild_rank: int,
    open_bundles: Sequence[Bundle],
    rng: random.Random | None = None,
) -> Play:
    """Best play when another player has gone out and exposed ``open_bundles``.

    Cards may be added to the open bundles as well as laid down in new ones.
    The open bundles themselves are never modified; the result carries
    extended copies.
    """

    hand = list(hand)

    def with_plays(result: Play, combo: Sequence[_BundlePlay]) -> Play:
        plays: list[list[Card]] = [[] for _ in open_bundles]
        extended = [bundle.copy() for bundle in open_bundles]
        for bundle_play in combo:
            plays[bundle_play.bundle_index] = [hand[idx] for idx in bundle_play.positions]
            extended[bundle_play.bundle_index] = bundle_play.result.copy()
        return Play(result.bundles, result.leftover, plays, extended)

    plain = with_plays(find_best_play(hand, wild_rank, rng), ())
    if plain.goes_out or not open_bundles:
        return plain

    best = plain
    cache: dict[frozenset[int], Play] = {}
    for combo in _mixed_plays(hand, open_bundles):
        used = frozenset(idx for bundle_play in combo for idx in bundle_play.positions)
        if len(used) >= len(hand):
            continue
        result = cache.get(used)
        if result is None:
            remaining = [card for idx, card in enumerate(hand) if idx not in used]
            result = find_best_play(remaining, wild_rank, rng)
            cache[used] = result
        if result.goes_out:
            logger.debug("going out by playing %d card(s) on open bundles", len(used))
            return with_plays(result, combo)
        if result.score < best.score:
            best = with_plays(result, combo)
    return best
