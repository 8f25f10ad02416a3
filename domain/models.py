from __future__ import annotations

import enum
from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Tuple


SUITS = ("♠", "♥", "♦", "♣")
RANK_NAMES = {11: "J", 12: "Q", 13: "K", 14: "A"}


@dataclass
class Account:
    """
    Economy record for a single actor.

    The model is independent of any particular chat platform or storage
    layout. `last_daily` is an epoch timestamp in milliseconds, 0 when the
    daily reward has never been claimed.
    """

    id: str
    balance: int = 0
    last_daily: int = 0
    inventory: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    price: int


@dataclass(frozen=True)
class GambleOutcome:
    """Multiplier applied to a wager plus a human readable label."""

    multiplier: Fraction
    label: str


@dataclass(frozen=True)
class Card:
    rank: int
    suit: str

    def __str__(self) -> str:
        return f"{RANK_NAMES.get(self.rank, str(self.rank))}{self.suit}"


Hand = Tuple[Card, ...]


@dataclass(frozen=True)
class CoinFlip:
    win: bool


@dataclass(frozen=True)
class SlotSpin:
    symbols: Tuple[str, str, str]
    multiplier: Fraction


class PayoutConvention(enum.Enum):
    """
    How a gamble multiplier is turned into coins.

    TOTAL_RETURN: the multiplier is the share of the (already debited) bet
    credited back, so 2 is break-even.
    PROFIT: the stake is returned and the multiplier is the profit on top
    of it; a multiplier of 0 still forfeits the stake.
    """

    TOTAL_RETURN = "total_return"
    PROFIT = "profit"
