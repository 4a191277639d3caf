"""Self-play driver running AI-only Michigan matches."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Sequence

from . import actions, scoreboard
from .actions import TurnOutcome
from .bundles import Bundle
from .search import find_best_play
from .state import AIProfile, Deck, MichiganConfig, PlayerState, default_profiles

__all__ = ["RoundReport", "MatchReport", "play_round", "play_match"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RoundReport:
    """Turn log and outcome of one round."""

    summary: scoreboard.RoundSummary
    turns: list[TurnOutcome] = field(default_factory=list)
    open_bundles: list[Bundle] = field(default_factory=list)


@dataclass(slots=True)
class MatchReport:
    """Players, round reports and cumulative scores of a finished match."""

    players: list[PlayerState]
    history: scoreboard.MatchHistory
    rounds: list[RoundReport] = field(default_factory=list)

    def winner(self) -> PlayerState | None:
        idx = self.history.winner_index()
        return None if idx is None else self.players[idx]


def play_round(
    config: MichiganConfig,
    players: Sequence[PlayerState],
    round_number: int,
    starting_index: int,
    rng: random.Random,
) -> RoundReport:
    """Deal and play one round, wild rank and hand size both ``round_number``."""

    num_players = len(players)
    wild_rank = round_number
    deck = Deck.shuffled(rng, config.decks, config.jokers_per_deck)
    for player in players:
        player.reset(deck.draw_hand(round_number), round_number, config, rng)
    logger.info("round %d: %d player(s), %s starts", round_number, num_players, players[starting_index].name)

    turns: list[TurnOutcome] = []
    current = starting_index
    went_out: int | None = None
    for _ in range(config.max_turns_per_round):
        outcome = actions.take_turn(players[current], deck, wild_rank, rng, config.weights)
        turns.append(outcome)
        if outcome.went_out:
            went_out = current
            break
        current = (current + 1) % num_players

    scores = [0 for _ in range(num_players)]
    open_bundles: list[Bundle] = []
    if went_out is None:
        logger.warning("round %d hit the %d turn cap", round_number, config.max_turns_per_round)
        for idx, player in enumerate(players):
            scores[idx] = find_best_play(player.hand, wild_rank, rng).score
    else:
        open_bundles = [bundle.copy() for bundle in players[went_out].laid_bundles]
        for offset in range(1, num_players):
            idx = (went_out + offset) % num_players
            outcome = actions.take_last_turn(players[idx], deck, wild_rank, open_bundles, rng)
            turns.append(outcome)
            if outcome.extended_bundles:
                open_bundles = outcome.extended_bundles
            scores[idx] = outcome.score

    summary = scoreboard.RoundSummary(round_number=round_number, went_out_index=went_out, scores=scores)
    logger.info("round %d finished after %d turn(s): %s", round_number, len(turns), scores)
    return RoundReport(summary, turns, open_bundles)


def play_match(
    config: MichiganConfig | None = None,
    profiles: Sequence[AIProfile] | None = None,
    *,
    seed: int | None = None,
) -> MatchReport:
    """Play every configured round and return the accumulated scores."""

    config = config or MichiganConfig()
    if profiles is None:
        profiles = default_profiles(config.num_players)
    if len(profiles) != config.num_players:
        raise ValueError("profile count does not match number of players")

    rng = random.Random(seed)
    players = [PlayerState(profile) for profile in profiles]
    report = MatchReport(players, scoreboard.MatchHistory(num_players=config.num_players))
    for offset, round_number in enumerate(config.rounds()):
        round_report = play_round(config, players, round_number, offset % config.num_players, rng)
        report.history.record(round_report.summary)
        report.rounds.append(round_report)
    return report
