"""Set and run bundles with their extension and shedding rules."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator

from .cards import ACE, KING, Card, Suit, is_wild

MIN_BUNDLE_SIZE = 3
MAX_RUN_LENGTH = KING - ACE + 1


class BundleKind(str, Enum):
    """The closed set of bundle variants."""

    SET = "set"
    RUN = "run"


@dataclass(slots=True)
class Bundle:
    """Cards grouped into a set or a run for one round's wild rank.

    Bundles are mutable. Any exploratory change must be made on a
    :meth:`copy` so that tracked bundles are never disturbed.
    """

    cards: list[Card]
    wild_rank: int

    kind: ClassVar[BundleKind]

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def is_wild(self, card: Card) -> bool:
        return is_wild(card, self.wild_rank)

    def non_wild_cards(self) -> list[Card]:
        return [card for card in self.cards if not self.is_wild(card)]

    def contains_instance(self, card: Card) -> bool:
        return any(existing.same_instance(card) for existing in self.cards)

    def can_add(self, card: Card) -> bool:
        raise NotImplementedError

    def add_card(self, card: Card, toward_max: bool | None = None) -> bool:
        raise NotImplementedError

    def remove_one(self, rng: random.Random | None = None) -> Card:
        raise NotImplementedError

    def try_replace_with_wild(self, wild: Card) -> Card | None:
        raise NotImplementedError

    def copy(self) -> "Bundle":
        raise NotImplementedError

    def _require_slack(self) -> None:
        if len(self.cards) <= MIN_BUNDLE_SIZE:
            raise ValueError("cannot shed a card from a minimum-size bundle")

    def __str__(self) -> str:
        listing = ", ".join(str(card) for card in self.cards)
        return f"{self.kind.value.title()}: ({listing})"


@dataclass(slots=True)
class CardSet(Bundle):
    """Cards sharing ``set_value``, padded with wilds."""

    set_value: int

    kind: ClassVar[BundleKind] = BundleKind.SET

    def can_add(self, card: Card) -> bool:
        return card.rank == self.set_value or self.is_wild(card)

    def add_card(self, card: Card, toward_max: bool | None = None) -> bool:
        if not self.can_add(card):
            return False
        self.cards.append(card)
        return True

    def remove_one(self, rng: random.Random | None = None) -> Card:
        """Shed a natural card while another remains, otherwise a wild."""

        self._require_slack()
        naturals = [idx for idx, card in enumerate(self.cards) if not self.is_wild(card)]
        if len(naturals) > 1:
            return self.cards.pop(naturals[0])
        wild_idx = next(idx for idx, card in enumerate(self.cards) if self.is_wild(card))
        return self.cards.pop(wild_idx)

    def try_replace_with_wild(self, wild: Card) -> Card | None:
        naturals = [idx for idx, card in enumerate(self.cards) if not self.is_wild(card)]
        if len(naturals) < 2:
            return None
        displaced = self.cards.pop(naturals[0])
        self.cards.append(wild)
        return displaced

    def copy(self) -> "CardSet":
        return CardSet(list(self.cards), self.wild_rank, self.set_value)


@dataclass(slots=True)
class CardRun(Bundle):
    """Consecutive ranks of one suit spanning ``min_card``..``max_card``.

    ``cards`` is kept in positional order: ``cards[0]`` occupies
    ``min_card.rank`` and ``cards[-1]`` occupies ``max_card.rank``.
    """

    min_card: Card
    max_card: Card

    kind: ClassVar[BundleKind] = BundleKind.RUN

    @property
    def suit(self) -> Suit:
        return self.min_card.suit

    @property
    def low(self) -> int:
        return self.min_card.rank

    @property
    def high(self) -> int:
        return self.max_card.rank

    def has_room_low(self) -> bool:
        return self.low > ACE

    def has_room_high(self) -> bool:
        return self.high < KING

    def _set_span(self, low: int, high: int) -> None:
        self.min_card = Card(low, self.suit)
        self.max_card = Card(high, self.suit)

    def can_add(self, card: Card) -> bool:
        if self.is_wild(card):
            return len(self.cards) < MAX_RUN_LENGTH
        if card.suit != self.suit:
            return False
        return card.rank == self.low - 1 or card.rank == self.high + 1

    def _extends_low(self, card: Card) -> bool:
        return self.has_room_low() and card.rank == self.low - 1 and (
            card.suit == self.suit or self.is_wild(card)
        )

    def _extends_high(self, card: Card) -> bool:
        return self.has_room_high() and card.rank == self.high + 1 and (
            card.suit == self.suit or self.is_wild(card)
        )

    def add_card(self, card: Card, toward_max: bool | None = None) -> bool:
        """Place ``card`` at the end it extends.

        A wild that does not extend an end naturally, or that comes with an
        explicit ``toward_max``, is placed by :meth:`add_wild`.
        """

        wild = self.is_wild(card)
        if not (wild and toward_max is not None):
            if self._extends_low(card):
                self.cards.insert(0, card)
                self._set_span(self.low - 1, self.high)
                return True
            if self._extends_high(card):
                self.cards.append(card)
                self._set_span(self.low, self.high + 1)
                return True
        if not wild:
            return False
        return self.add_wild(card, toward_max)

    def add_wild(self, card: Card, toward_max: bool | None = None) -> bool:
        """Append a wild at one end; ambiguous requests are refused."""

        if toward_max is None:
            low_open, high_open = self.has_room_low(), self.has_room_high()
            if low_open == high_open:
                return False
            toward_max = high_open
        if toward_max and self.has_room_high():
            self.cards.append(card)
            self._set_span(self.low, self.high + 1)
            return True
        if not toward_max and self.has_room_low():
            self.cards.insert(0, card)
            self._set_span(self.low - 1, self.high)
            return True
        return False

    def remove_one(self, rng: random.Random | None = None) -> Card:
        """Shed an end card, natural ends first, keeping the run contiguous."""

        self._require_slack()
        if not self.is_wild(self.cards[0]):
            shed_low = True
        elif not self.is_wild(self.cards[-1]):
            shed_low = False
        else:
            shed_low = (rng or random.Random()).random() < 0.5
        if shed_low:
            self._set_span(self.low + 1, self.high)
            return self.cards.pop(0)
        self._set_span(self.low, self.high - 1)
        return self.cards.pop()

    def try_replace_with_wild(self, wild: Card) -> Card | None:
        naturals = [idx for idx, card in enumerate(self.cards) if not self.is_wild(card)]
        if len(naturals) < 2:
            return None
        idx = naturals[0]
        displaced = self.cards[idx]
        self.cards[idx] = wild
        return displaced

    def copy(self) -> "CardRun":
        return CardRun(list(self.cards), self.wild_rank, self.min_card, self.max_card)
