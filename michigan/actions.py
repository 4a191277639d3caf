"""Turn policies for AI players: drawing, laying down and discarding."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Sequence

from .bundles import Bundle
from .cards import Card, hand_score, is_wild, remove_instance
from .evaluation import find_best_discard, get_last_turn_discard
from .rules import DEFAULT_DISCARD_WEIGHTS, DiscardUnavailable, DiscardWeights
from .search import Play, find_best_play, find_best_play_with_open_bundles
from .state import Deck, Difficulty, PlayerState
from .tracker import get_group_discard

__all__ = ["DRAW_SOURCES", "TurnOutcome", "choose_draw", "choose_discard", "take_turn", "take_last_turn"]

logger = logging.getLogger(__name__)

DRAW_SOURCES = ("deck", "discard")


@dataclass(slots=True)
class TurnOutcome:
    """Everything one player did during a single turn."""

    player: str
    source: str
    drew: Card
    discard: Card
    went_out: bool = False
    bundles: list[Bundle] = field(default_factory=list)
    bundle_plays: list[list[Card]] = field(default_factory=list)
    extended_bundles: list[Bundle] = field(default_factory=list)
    score: int = 0


def choose_draw(
    hand: Sequence[Card],
    top_of_discard: Card | None,
    wild_rank: int,
    difficulty: Difficulty,
    rng: random.Random,
) -> str:
    """Return ``"deck"`` or ``"discard"`` for the coming draw.

    Easy players flip a coin. Others take the discard only when it improves
    the best play available to the hand.
    """

    if top_of_discard is None:
        return "deck"
    if difficulty is Difficulty.EASY:
        return "discard" if rng.random() < 0.5 else "deck"
    current = find_best_play(hand, wild_rank, rng).score
    with_discard = find_best_play([*hand, top_of_discard], wild_rank, rng).score
    return "discard" if with_discard < current else "deck"


def _advised_discard(cards: Sequence[Card], wild_rank: int, weights: DiscardWeights) -> Card:
    if all(is_wild(card, wild_rank) for card in cards):
        # Nothing but wilds left: throw the one worth most points.
        return get_last_turn_discard(cards)
    return find_best_discard(cards, wild_rank, weights)


def choose_discard(
    player: PlayerState,
    play: Play,
    wild_rank: int,
    rng: random.Random,
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS,
) -> Card:
    """Return the card ``player`` throws away when not going out."""

    difficulty = player.profile.difficulty
    if difficulty is Difficulty.EASY:
        naturals = [card for card in player.hand if not is_wild(card, wild_rank)]
        return rng.choice(naturals or player.hand)
    if difficulty is Difficulty.HARD and player.tracker is not None:
        try:
            return player.tracker.choose_discard()
        except DiscardUnavailable:
            logger.debug("%s: tracked grouping left only wilds, using the search leftover", player.name)
    return _advised_discard(play.leftover or player.hand, wild_rank, weights)


def _draw(player: PlayerState, deck: Deck, wild_rank: int, rng: random.Random) -> tuple[str, Card]:
    source = choose_draw(player.hand, deck.top_of_discard, wild_rank, player.profile.difficulty, rng)
    card = deck.draw_from_discard() if source == "discard" else deck.draw_from_deck()
    player.hand.append(card)
    if player.tracker is not None:
        player.tracker.draw(card)
    return source, card


def _lay_down(player: PlayerState, play: Play) -> None:
    for bundle in play.bundles:
        for card in bundle.cards:
            remove_instance(player.hand, card)
    for cards in play.bundle_plays:
        for card in cards:
            remove_instance(player.hand, card)
    player.laid_bundles.extend(play.bundles)


def _go_out_with_group(
    player: PlayerState, wild_rank: int, rng: random.Random
) -> tuple[Card, list[Bundle]] | None:
    """Return the discard and bundles of the tracker's going-out grouping, if any."""

    tracker = player.tracker
    if tracker is None:
        return None
    group = tracker.going_out_group()
    if group is None:
        return None
    group = replace(group, bundles=list(group.bundles), used_cards=list(group.used_cards))
    discard = get_group_discard(group, tracker.round_number, wild_rank, rng, tracker.weights)
    return discard, group.bundles


def take_turn(
    player: PlayerState,
    deck: Deck,
    wild_rank: int,
    rng: random.Random,
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS,
) -> TurnOutcome:
    """Draw, go out if the hand allows it, and discard.

    Players with a tracker also go out on a tracked grouping that the greedy
    search missed.
    """

    source, drew = _draw(player, deck, wild_rank, rng)
    play = find_best_play(player.hand, wild_rank, rng)
    going_out: tuple[Card, list[Bundle]] | None
    if play.goes_out:
        going_out = play.leftover[0], list(play.bundles)
    else:
        going_out = _go_out_with_group(player, wild_rank, rng)

    if going_out is not None:
        discard, bundles = going_out
        _lay_down(player, Play(bundles, [discard]))
        remove_instance(player.hand, discard)
        player.has_gone_out = True
        deck.discard(discard)
        logger.info("%s goes out with %s, discarding %s", player.name, " | ".join(map(str, bundles)), discard)
        return TurnOutcome(player.name, source, drew, discard, True, list(bundles))

    discard = choose_discard(player, play, wild_rank, rng, weights)
    remove_instance(player.hand, discard)
    if player.tracker is not None:
        player.tracker.discard(discard)
    deck.discard(discard)
    logger.debug("%s drew %s from the %s and discarded %s", player.name, drew, source, discard)
    return TurnOutcome(player.name, source, drew, discard)


def take_last_turn(
    player: PlayerState,
    deck: Deck,
    wild_rank: int,
    open_bundles: Sequence[Bundle],
    rng: random.Random,
) -> TurnOutcome:
    """Closing-lap turn once another player has gone out.

    Cards may be played onto ``open_bundles``; whatever stays in hand after
    the discard is the player's score for the round.
    """

    source, drew = _draw(player, deck, wild_rank, rng)
    play = find_best_play_with_open_bundles(player.hand, wild_rank, open_bundles, rng)
    if play.goes_out:
        discard = play.leftover[0]
    else:
        discard = get_last_turn_discard(play.leftover, wild_rank)
    _lay_down(player, play)
    remove_instance(player.hand, discard)
    deck.discard(discard)
    score = hand_score(player.hand)
    logger.debug("%s ends the round holding %d point(s)", player.name, score)
    return TurnOutcome(
        player.name,
        source,
        drew,
        discard,
        play.goes_out,
        list(play.bundles),
        play.bundle_plays,
        play.extended_bundles,
        score,
    )
