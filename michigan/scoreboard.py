"""Helpers for tracking multi-round Michigan match results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

__all__ = ["RoundSummary", "PlayerMatchTotal", "MatchHistory"]


@dataclass(frozen=True, slots=True)
class RoundSummary:
    """Points each player was left holding after a single round.

    ``went_out_index`` is ``None`` when the round hit its turn cap before
    anyone went out.
    """

    round_number: int
    went_out_index: int | None
    scores: Sequence[int]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate match totals accumulated across all recorded rounds."""

    player_index: int
    rounds_won: int
    points: int


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round summaries for a match."""

    num_players: int
    rounds: list[RoundSummary] = field(default_factory=list)
    _wins: list[int] = field(init=False, repr=False)
    _points: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._wins = [0 for _ in range(self.num_players)]
        self._points = [0 for _ in range(self.num_players)]

    def record(self, summary: RoundSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if len(summary.scores) != self.num_players:
            raise ValueError("score count does not match number of players")
        if summary.went_out_index is not None and not 0 <= summary.went_out_index < self.num_players:
            raise ValueError("player index out of range")
        if any(score < 0 for score in summary.scores):
            raise ValueError("round scores cannot be negative")
        self.rounds.append(summary)
        for idx, score in enumerate(summary.scores):
            self._points[idx] += score
        if summary.went_out_index is not None:
            self._wins[summary.went_out_index] += 1

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(player_index=idx, rounds_won=self._wins[idx], points=self._points[idx])
            for idx in range(self.num_players)
        ]

    def winner_index(self) -> int | None:
        """Return the seat with the fewest points; ties go to the earlier seat."""

        if not self.rounds:
            return None
        return min(range(self.num_players), key=lambda idx: self._points[idx])
