from __future__ import annotations

import random

from michigan import simulate
from michigan.state import AIProfile, Difficulty, MichiganConfig, PlayerState


def _config(**overrides: int) -> MichiganConfig:
    values = {"num_players": 3, "first_round": 3, "last_round": 5}
    values.update(overrides)
    return MichiganConfig(**values)


def test_match_plays_every_configured_round() -> None:
    report = simulate.play_match(_config(), seed=11)

    assert [summary.round_number for summary in report.history.rounds] == [3, 4, 5]
    totals = report.history.totals()
    for idx, total in enumerate(totals):
        assert total.points == sum(summary.scores[idx] for summary in report.history.rounds)
    assert report.winner() is not None


def test_player_who_goes_out_scores_nothing() -> None:
    report = simulate.play_match(_config(), seed=5)

    for round_report in report.rounds:
        summary = round_report.summary
        if summary.went_out_index is not None:
            assert summary.scores[summary.went_out_index] == 0


def test_starting_player_rotates() -> None:
    report = simulate.play_match(_config(), seed=2)

    starters = [round_report.turns[0].player for round_report in report.rounds]
    assert starters == ["AI 1", "AI 2", "AI 3"]


def test_closing_lap_gives_everyone_else_one_turn() -> None:
    report = simulate.play_match(_config(num_players=4, last_round=4), seed=8)

    for round_report in report.rounds:
        summary = round_report.summary
        if summary.went_out_index is None:
            continue
        out_turn = next(idx for idx, turn in enumerate(round_report.turns) if turn.went_out)
        closing = round_report.turns[out_turn + 1 :]
        assert len(closing) == 3
        assert "AI %d" % (summary.went_out_index + 1) not in {turn.player for turn in closing}


def test_same_seed_replays_the_same_match() -> None:
    first = simulate.play_match(_config(), seed=21)
    second = simulate.play_match(_config(), seed=21)

    assert [s.scores for s in first.history.rounds] == [s.scores for s in second.history.rounds]


def test_turn_cap_scores_every_hand() -> None:
    config = MichiganConfig(num_players=2, first_round=1, last_round=1, max_turns_per_round=6)
    players = [PlayerState(AIProfile("A", Difficulty.EASY)), PlayerState(AIProfile("B", Difficulty.HARD))]

    round_report = simulate.play_round(config, players, 1, 0, random.Random(0))

    assert round_report.summary.went_out_index is None
    assert len(round_report.turns) == 6
    assert all(len(player.hand) == 1 for player in players)


def test_single_difficulty_profiles() -> None:
    profiles = [AIProfile(f"Hard {idx}", Difficulty.HARD) for idx in range(2)]

    report = simulate.play_match(_config(num_players=2, last_round=4), profiles, seed=4)

    assert [player.name for player in report.players] == ["Hard 0", "Hard 1"]
    assert len(report.history.rounds) == 2
