"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..bundles import Bundle
from ..cards import RANK_LABELS, Card, Suit, is_wild
from ..scoreboard import MatchHistory
from ..search import Play
from ..state import PlayerState

_SUIT_SYMBOLS = {
    Suit.SPADES: ("♠", "cyan"),
    Suit.HEARTS: ("♥", "red"),
    Suit.DIAMONDS: ("♦", "magenta"),
    Suit.CLUBS: ("♣", "green"),
}


def format_card(card: Card, wild_rank: int | None = None) -> str:
    """Return a Rich-rendered label for ``card``; wilds are underlined."""

    if card.is_joker:
        colour = "red" if card.suit.is_red else "white"
        return f"[bold {colour}]JK[/bold {colour}]"
    symbol, colour = _SUIT_SYMBOLS.get(card.suit, (card.suit.value, "white"))
    label = f"{RANK_LABELS.get(card.rank, str(card.rank))}{symbol}"
    if wild_rank is not None and is_wild(card, wild_rank):
        return f"[underline {colour}]{label}[/underline {colour}]"
    return f"[{colour}]{label}[/{colour}]"


def format_cards(cards: Sequence[Card], wild_rank: int | None = None) -> str:
    if not cards:
        return "[dim]-[/dim]"
    return " ".join(format_card(card, wild_rank) for card in cards)


def format_bundle(bundle: Bundle) -> str:
    return f"[bold]{bundle.kind.value}[/bold] {format_cards(bundle.cards, bundle.wild_rank)}"


def render_play(play: Play, wild_rank: int, *, title: str = "Best Play") -> RenderableType:
    """Return a Rich panel listing the bundles, open-bundle plays and leftover."""

    table = Table(box=box.SIMPLE, expand=True)
    table.add_column("Bundle", justify="left", style="bold")
    table.add_column("Cards", justify="left")
    for idx, bundle in enumerate(play.bundles, start=1):
        table.add_row(f"{idx}. {bundle.kind.value}", format_cards(bundle.cards, wild_rank))
    for idx, cards in enumerate(play.bundle_plays, start=1):
        if cards:
            extended = play.extended_bundles[idx - 1]
            table.add_row(f"open {idx}", f"{format_cards(cards, wild_rank)} -> {format_bundle(extended)}")
    if not play.bundles and not any(play.bundle_plays):
        table.add_row("[dim]none[/dim]", "[dim]no bundle can be formed[/dim]")

    grid = Table.grid(expand=True)
    grid.add_column(justify="left")
    grid.add_row(f"[cyan]Leftover[/cyan]: {format_cards(play.leftover, wild_rank)}")
    grid.add_row(f"[cyan]Score[/cyan]: {play.score}")
    if play.goes_out:
        grid.add_row("[bold green]Goes out[/bold green]")
    return Panel(Group(table, grid), title=title, padding=(0, 1), border_style="cyan")


def render_scoreboard(players: Sequence[PlayerState], history: MatchHistory) -> Table:
    table = Table(title="Michigan Scoreboard", box=box.SIMPLE_HEAVY)
    table.add_column("Player", justify="left")
    table.add_column("Difficulty", justify="left")
    for summary in history.rounds:
        table.add_column(str(summary.round_number), justify="right")
    table.add_column("Out", justify="right")
    table.add_column("Total", justify="right", style="bold")

    winner = history.winner_index()
    for total in history.totals():
        player = players[total.player_index]
        cells = [str(summary.scores[total.player_index]) for summary in history.rounds]
        name = f"[green]{player.name}[/green]" if total.player_index == winner else player.name
        table.add_row(name, player.profile.difficulty.value, *cells, str(total.rounds_won), str(total.points))
    return table
