"""Discard selection helpers for leftover cards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .cards import Card, is_wild
from .rules import DEFAULT_DISCARD_WEIGHTS, DiscardUnavailable, DiscardWeights

__all__ = ["CardPotential", "card_potentials", "find_best_discard", "get_last_turn_discard"]


@dataclass(slots=True)
class CardPotential:
    """How strongly a leftover card connects to the rest of the leftover."""

    card: Card
    same_rank: int = 0
    strong_run: int = 0
    weak_run: int = 0

    def total(self, weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS) -> int:
        return (
            self.same_rank * weights.same_rank
            + self.strong_run * weights.strong_run
            + self.weak_run * weights.weak_run
        )


def card_potentials(leftover: Sequence[Card], wild_rank: int) -> list[CardPotential]:
    """Return the potential of every non-wild card in ``leftover``.

    Each other natural card of equal rank counts as a set partner. A
    same-suit card one rank away is a strong run neighbour and one two ranks
    away a weak one.
    """

    naturals = [card for card in leftover if not is_wild(card, wild_rank)]
    potentials: list[CardPotential] = []
    for idx, card in enumerate(naturals):
        potential = CardPotential(card)
        for other_idx, other in enumerate(naturals):
            if other_idx == idx:
                continue
            if other.rank == card.rank:
                potential.same_rank += 1
            elif other.suit == card.suit:
                gap = abs(other.rank - card.rank)
                if gap == 1:
                    potential.strong_run += 1
                elif gap == 2:
                    potential.weak_run += 1
        potentials.append(potential)
    return potentials


def find_best_discard(
    leftover: Sequence[Card],
    wild_rank: int,
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS,
) -> Card:
    """Return the leftover card least likely to join a future bundle.

    Wilds are never chosen. Ties go to the higher rank since it costs more
    points if it stays in hand.
    """

    potentials = card_potentials(leftover, wild_rank)
    if not potentials:
        raise DiscardUnavailable("every leftover card is wild")
    best = min(potentials, key=lambda potential: (potential.total(weights), -potential.card.rank))
    return best.card


def get_last_turn_discard(leftover: Sequence[Card], wild_rank: int | None = None) -> Card:
    """Discard for the closing lap: the highest-ranked card left over.

    When ``wild_rank`` is given, natural cards are preferred over wilds.
    """

    if not leftover:
        raise ValueError("no leftover cards to discard")
    pool = list(leftover)
    if wild_rank is not None:
        naturals = [card for card in pool if not is_wild(card, wild_rank)]
        if naturals:
            pool = naturals
    return max(pool, key=lambda card: card.rank)
