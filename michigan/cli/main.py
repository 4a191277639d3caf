"""Typer entry-point wiring for the Michigan CLI."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..bundles import Bundle
from ..cards import Card, stamp_instances
from ..evaluation import find_best_discard
from ..rules import FIRST_ROUND, LAST_ROUND, DiscardUnavailable, try_build, wild_rank_for_round
from ..search import find_best_play, find_best_play_with_open_bundles
from ..simulate import play_match
from ..state import AIProfile, Difficulty, MichiganConfig, default_profiles
from ..tracker import BundleTracker, can_bundle_group_go_out
from .render import format_bundle, format_card, format_cards, render_play, render_scoreboard

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

MAX_GROUP_ROWS = 10


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions while running."),
) -> None:
    """Michigan rummy decision engine."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
            force=True,
        )


def _parse_codes(codes: Sequence[str]) -> list[Card]:
    try:
        return [Card.parse(code) for code in codes]
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_table(hand_codes: Sequence[str], open_listings: Sequence[str], wild_rank: int) -> tuple[list[Card], list[Bundle]]:
    """Parse the hand and the open bundles, giving every card its own token."""

    hand = _parse_codes(hand_codes)
    groups = [_parse_codes(listing.replace(",", " ").split()) for listing in open_listings]
    stamped = stamp_instances([*hand, *(card for group in groups for card in group)])
    hand, rest = stamped[: len(hand)], stamped[len(hand) :]

    open_bundles: list[Bundle] = []
    for listing, group in zip(open_listings, groups):
        cards, rest = rest[: len(group)], rest[len(group) :]
        bundle = try_build(cards, wild_rank, assume_order=True)
        if bundle is None:
            raise typer.BadParameter(f"'{listing}' is not a bundle for wild rank {wild_rank}")
        open_bundles.append(bundle)
    return hand, open_bundles


def _check_round(round_number: int) -> int:
    try:
        return wild_rank_for_round(round_number)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("best-play")
def best_play(
    cards: List[str] = typer.Argument(..., help="Hand as card codes, e.g. 5H 10S JK."),
    round_number: int = typer.Option(FIRST_ROUND, "--round", "-r", help="Round number; also the wild rank."),
    open_bundles: List[str] = typer.Option(
        [],
        "--open",
        "-o",
        help="An open bundle in play order, e.g. '4C,5C,6C'. Repeat for several.",
    ),
    seed: Optional[int] = typer.Option(None, help="Random seed for wild placement."),
) -> None:
    """Show the bundles that leave the fewest points in a hand."""

    wild_rank = _check_round(round_number)
    hand, bundles = _parse_table(cards, open_bundles, wild_rank)
    rng = random.Random(seed)

    if bundles:
        play = find_best_play_with_open_bundles(hand, wild_rank, bundles, rng)
    else:
        play = find_best_play(hand, wild_rank, rng)
    console.print(render_play(play, wild_rank))

    if play.goes_out:
        console.print(f"Discard {format_card(play.leftover[0], wild_rank)} to go out.")
        return
    try:
        discard = find_best_discard(play.leftover, wild_rank)
    except DiscardUnavailable:
        console.print("[yellow]Only wild cards are left over; nothing sensible to discard.[/yellow]")
        return
    console.print(f"Suggested discard: {format_card(discard, wild_rank)}")


@app.command("groups")
def groups(
    cards: List[str] = typer.Argument(..., help="Hand as card codes, e.g. 5H 10S JK."),
    round_number: int = typer.Option(FIRST_ROUND, "--round", "-r", help="Round number; also the wild rank."),
    seed: Optional[int] = typer.Option(None, help="Random seed for wild placement."),
) -> None:
    """List the bundle groupings tracked for a hand, best first."""

    wild_rank = _check_round(round_number)
    hand, _ = _parse_table(cards, [], wild_rank)
    tracker = BundleTracker(round_number, rng=random.Random(seed))
    tracker.deal(hand)

    table = Table(title=f"{len(tracker.bundles)} bundle(s), {len(tracker.groups)} grouping(s)", box=box.SIMPLE)
    table.add_column("Score", justify="right")
    table.add_column("Bundles", justify="left")
    table.add_column("Unused", justify="left")
    table.add_column("Out", justify="center")
    for group in tracker.groups[:MAX_GROUP_ROWS]:
        table.add_row(
            str(group.score),
            "\n".join(format_bundle(bundle) for bundle in group.bundles),
            format_cards(group.unused_cards, wild_rank),
            "yes" if can_bundle_group_go_out(group, round_number) else "",
        )
    console.print(table)


@app.command("simulate")
def simulate(
    players: int = typer.Option(4, min=1, max=5, help="Number of AI players."),
    first_round: int = typer.Option(FIRST_ROUND, min=1, max=LAST_ROUND, help="First round to play."),
    last_round: int = typer.Option(LAST_ROUND, min=1, max=LAST_ROUND, help="Last round to play."),
    difficulty: Optional[Difficulty] = typer.Option(
        None, case_sensitive=False, help="Give every AI this difficulty (default: a mix)."
    ),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible matches (omit for randomness)."),
) -> None:
    """Play an AI-only match and print the scoreboard."""

    try:
        config = MichiganConfig(num_players=players, first_round=first_round, last_round=last_round)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if difficulty is None:
        profiles = default_profiles(players)
    else:
        profiles = [AIProfile(f"AI {idx + 1}", difficulty) for idx in range(players)]

    report = play_match(config, profiles, seed=seed)
    console.print(render_scoreboard(report.players, report.history))
    winner = report.winner()
    if winner is not None:
        console.print(f"[bold green]{winner.name} wins the match.[/bold green]")


def main() -> None:
    """Entry-point for the ``michigan`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
