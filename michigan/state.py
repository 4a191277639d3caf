"""Table state for a Michigan match: configuration, deck and players."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List

import numpy as np

from . import encoding
from .bundles import Bundle
from .cards import Card
from .rules import (
    DEFAULT_DISCARD_WEIGHTS,
    DEFAULT_ROUND_GATES,
    FIRST_ROUND,
    LAST_ROUND,
    DiscardWeights,
    IllegalDraw,
    RoundGates,
)
from .tracker import BundleTracker

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from numpy.typing import NDArray

    UInt16Array = NDArray[np.uint16]
else:
    UInt16Array = np.ndarray

MAX_AI_PLAYERS = 5


class Difficulty(str, Enum):
    """How much effort an AI player puts into its decisions."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True, slots=True)
class AIProfile:
    """Name, difficulty and pacing of one AI seat.

    The delays are hints for a presentation layer; the engine never sleeps.
    """

    name: str
    difficulty: Difficulty = Difficulty.MEDIUM
    draw_delay: float = 1.0
    discard_delay: float = 1.0


@dataclass(slots=True)
class MichiganConfig:
    """Runtime configuration for a Michigan match."""

    num_players: int = 4
    first_round: int = FIRST_ROUND
    last_round: int = LAST_ROUND
    decks: int = 2
    jokers_per_deck: int = 2
    gates: RoundGates = DEFAULT_ROUND_GATES
    weights: DiscardWeights = DEFAULT_DISCARD_WEIGHTS
    max_turns_per_round: int = 500

    def __post_init__(self) -> None:
        if not 1 <= self.num_players <= MAX_AI_PLAYERS:
            raise ValueError(f"num_players must be between 1 and {MAX_AI_PLAYERS}")
        if not 1 <= self.first_round <= self.last_round <= LAST_ROUND:
            raise ValueError(f"rounds must satisfy 1 <= first_round <= last_round <= {LAST_ROUND}")
        if self.decks < 1:
            raise ValueError("decks must be positive")
        if self.max_turns_per_round < 1:
            raise ValueError("max_turns_per_round must be positive")

    def rounds(self) -> range:
        return range(self.first_round, self.last_round + 1)


@dataclass(slots=True)
class Deck:
    """Stock and discard pile of a round.

    The shuffled stock is an array of encoded card identifiers consumed from
    ``top``. Every card handed out carries its identifier as ``uid``, so the
    two copies of a card in a double deck stay distinguishable.
    """

    rng: random.Random = field(default_factory=random.Random)
    decks: int = 2
    jokers_per_deck: int = 2
    stock: UInt16Array = field(default_factory=lambda: np.zeros(0, dtype=np.uint16))
    top: int = 0
    discard_pile: List[Card] = field(default_factory=list)

    @classmethod
    def shuffled(cls, rng: random.Random, decks: int = 2, jokers_per_deck: int = 2) -> "Deck":
        """Return a freshly shuffled deck with one card turned onto the discard pile."""

        ids = encoding.deck_ids(decks, jokers_per_deck)
        rng.shuffle(ids)
        deck = cls(rng, decks, jokers_per_deck, np.array(ids, dtype=np.uint16))
        deck.discard(deck.draw_from_deck())
        return deck

    @property
    def stock_size(self) -> int:
        return int(self.stock.size) - self.top

    @property
    def top_of_discard(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    def _reshuffle(self) -> None:
        if len(self.discard_pile) <= 1:
            raise IllegalDraw("stock and discard pile are both exhausted")
        keep = self.discard_pile.pop()
        ids = [_card_identifier(card) for card in self.discard_pile]
        self.rng.shuffle(ids)
        self.stock = np.array(ids, dtype=np.uint16)
        self.top = 0
        self.discard_pile = [keep]

    def draw_from_deck(self) -> Card:
        if self.stock_size == 0:
            self._reshuffle()
        identifier = int(self.stock[self.top])
        self.top += 1
        return encoding.card_from_id(identifier)

    def draw_from_discard(self) -> Card:
        if not self.discard_pile:
            raise IllegalDraw("discard pile is empty")
        return self.discard_pile.pop()

    def discard(self, card: Card) -> None:
        self.discard_pile.append(card)

    def draw_hand(self, size: int) -> list[Card]:
        if self.stock_size < size:
            return [self.draw_from_deck() for _ in range(size)]
        dealt = self.stock[self.top : self.top + size]
        self.top += size
        return encoding.cards_from_ids(dealt)


def _card_identifier(card: Card) -> int:
    if card.uid is not None and encoding.card_from_id(card.uid) == card:
        return card.uid
    if card.is_joker:
        return encoding.joker_id(card.suit.is_red)
    return encoding.card_id(card.rank, card.suit)


@dataclass(slots=True)
class PlayerState:
    """Hand and round bookkeeping for one seat."""

    profile: AIProfile
    hand: list[Card] = field(default_factory=list)
    laid_bundles: list[Bundle] = field(default_factory=list)
    has_gone_out: bool = False
    tracker: BundleTracker | None = None

    @property
    def name(self) -> str:
        return self.profile.name

    def reset(self, hand: list[Card], round_number: int, config: MichiganConfig, rng: random.Random) -> None:
        """Take a freshly dealt hand; hard players start tracking bundles."""

        self.hand = list(hand)
        self.laid_bundles = []
        self.has_gone_out = False
        self.tracker = None
        if self.profile.difficulty is Difficulty.HARD:
            self.tracker = BundleTracker(round_number, config.gates, config.weights, rng)
            self.tracker.deal(self.hand)


def default_profiles(num_players: int) -> list[AIProfile]:
    """Return AI seats cycling through the difficulties."""

    levels = list(Difficulty)
    return [AIProfile(f"AI {idx + 1}", levels[idx % len(levels)]) for idx in range(num_players)]
