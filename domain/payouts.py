from __future__ import annotations

import random
from collections import Counter
from fractions import Fraction
from typing import List, Optional

from .models import (
    SUITS,
    Card,
    CoinFlip,
    GambleOutcome,
    Hand,
    PayoutConvention,
    SlotSpin,
)


SLOT_SYMBOLS = ("🍒", "🍋", "🍊", "🍇", "🔔", "⭐")

SLOT_THREE_OF_A_KIND = Fraction(6)
SLOT_TWO_OF_A_KIND = Fraction(3)

COIN_WIN = GambleOutcome(multiplier=Fraction(2), label="Heads, you win")
COIN_LOSS = GambleOutcome(multiplier=Fraction(0), label="Tails, you lose")

STRAIGHT_FLUSH = GambleOutcome(Fraction(8), "Straight Flush")
FOUR_OF_A_KIND = GambleOutcome(Fraction(6), "Four of a Kind")
FULL_HOUSE = GambleOutcome(Fraction(4), "Full House")
FLUSH = GambleOutcome(Fraction(7, 2), "Flush")
STRAIGHT = GambleOutcome(Fraction(3), "Straight")
THREE_OF_A_KIND = GambleOutcome(Fraction(5, 2), "Three of a Kind")
TWO_PAIR = GambleOutcome(Fraction(2), "Two Pair")
ONE_PAIR = GambleOutcome(Fraction(3, 2), "One Pair")
HIGH_CARD = GambleOutcome(Fraction(0), "High Card")

_WHEEL = [14, 5, 4, 3, 2]


def coin_flip(rng: Optional[random.Random] = None) -> CoinFlip:
    rng = rng or random.Random()
    return CoinFlip(win=rng.random() < 0.5)


def coin_outcome(
    flip: CoinFlip,
    convention: PayoutConvention = PayoutConvention.TOTAL_RETURN,
) -> GambleOutcome:
    # A coin win doubles the stake under either convention.
    if not flip.win:
        return COIN_LOSS
    if convention is PayoutConvention.PROFIT:
        return GambleOutcome(multiplier=Fraction(1), label=COIN_WIN.label)
    return COIN_WIN


def slot_spin(rng: Optional[random.Random] = None) -> SlotSpin:
    """Spin three independent, uniform reels."""

    rng = rng or random.Random()
    symbols = (rng.choice(SLOT_SYMBOLS), rng.choice(SLOT_SYMBOLS), rng.choice(SLOT_SYMBOLS))
    return SlotSpin(symbols=symbols, multiplier=slot_multiplier(symbols))


def slot_multiplier(symbols) -> Fraction:
    distinct = len(set(symbols))
    if distinct == 1:
        return SLOT_THREE_OF_A_KIND
    if distinct == 2:
        return SLOT_TWO_OF_A_KIND
    return Fraction(0)


def slot_outcome(spin: SlotSpin) -> GambleOutcome:
    if spin.multiplier == SLOT_THREE_OF_A_KIND:
        label = "Jackpot"
    elif spin.multiplier == SLOT_TWO_OF_A_KIND:
        label = "Two of a kind"
    else:
        label = "No match"
    return GambleOutcome(multiplier=spin.multiplier, label=label)


def new_deck() -> List[Card]:
    return [Card(rank=rank, suit=suit) for suit in SUITS for rank in range(2, 15)]


def draw_poker_hand(rng: Optional[random.Random] = None) -> Hand:
    """Deal five cards without replacement from a fresh 52-card deck."""

    rng = rng or random.Random()
    return tuple(rng.sample(new_deck(), 5))


def _is_straight(ranks: List[int]) -> bool:
    ordered = sorted(ranks, reverse=True)
    if ordered == _WHEEL:
        return True
    if len(set(ordered)) != 5:
        return False
    return ordered[0] - ordered[4] == 4


def evaluate_poker_hand(hand: Hand) -> GambleOutcome:
    if len(hand) != 5:
        raise ValueError(f"A poker hand has 5 cards, got {len(hand)}")

    ranks = [card.rank for card in hand]
    flush = len({card.suit for card in hand}) == 1
    straight = _is_straight(ranks)
    counts = sorted(Counter(ranks).values(), reverse=True)

    if straight and flush:
        return STRAIGHT_FLUSH
    if counts[0] == 4:
        return FOUR_OF_A_KIND
    if counts[:2] == [3, 2]:
        return FULL_HOUSE
    if flush:
        return FLUSH
    if straight:
        return STRAIGHT
    if counts[0] == 3:
        return THREE_OF_A_KIND
    if counts[:2] == [2, 2]:
        return TWO_PAIR
    if counts[0] == 2:
        return ONE_PAIR
    return HIGH_CARD


def settle(
    bet: int,
    multiplier: Fraction,
    convention: PayoutConvention = PayoutConvention.TOTAL_RETURN,
) -> int:
    """
    Coins credited back after a bet of `bet` was debited.

    Under TOTAL_RETURN this is floor(bet * multiplier). Under PROFIT the
    stake comes back together with floor(bet * multiplier) on a win.
    """

    if multiplier < 0:
        raise ValueError("multiplier must not be negative")
    winnings = int(Fraction(bet) * Fraction(multiplier) // 1)
    if convention is PayoutConvention.PROFIT:
        return bet + winnings if multiplier > 0 else 0
    return winnings
