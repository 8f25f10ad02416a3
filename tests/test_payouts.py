import random
import unittest
from fractions import Fraction

from domain.models import Card, CoinFlip, PayoutConvention
from domain.payouts import (
    SLOT_SYMBOLS,
    coin_flip,
    coin_outcome,
    draw_poker_hand,
    evaluate_poker_hand,
    new_deck,
    settle,
    slot_multiplier,
    slot_outcome,
    slot_spin,
)


def hand(*cards):
    return tuple(Card(rank=rank, suit=suit) for rank, suit in cards)


class PokerEvaluationTests(unittest.TestCase):
    def assertHand(self, cards, label, multiplier):
        outcome = evaluate_poker_hand(hand(*cards))
        self.assertEqual(outcome.label, label)
        self.assertEqual(outcome.multiplier, Fraction(multiplier))

    def test_royal_straight_flush(self):
        self.assertHand([(14, "♠"), (13, "♠"), (12, "♠"), (11, "♠"), (10, "♠")], "Straight Flush", 8)

    def test_wheel_counts_as_straight(self):
        self.assertHand([(14, "♠"), (2, "♦"), (3, "♥"), (4, "♣"), (5, "♠")], "Straight", 3)
        self.assertHand([(14, "♥"), (2, "♥"), (3, "♥"), (4, "♥"), (5, "♥")], "Straight Flush", 8)

    def test_four_of_a_kind(self):
        self.assertHand([(9, "♠"), (9, "♦"), (9, "♥"), (9, "♣"), (5, "♠")], "Four of a Kind", 6)

    def test_full_house(self):
        self.assertHand([(2, "♣"), (2, "♦"), (2, "♥"), (5, "♠"), (5, "♣")], "Full House", 4)

    def test_flush(self):
        self.assertHand([(2, "♦"), (7, "♦"), (9, "♦"), (11, "♦"), (13, "♦")], "Flush", Fraction(7, 2))

    def test_straight(self):
        self.assertHand([(6, "♣"), (7, "♦"), (8, "♥"), (9, "♠"), (10, "♣")], "Straight", 3)

    def test_three_of_a_kind(self):
        self.assertHand([(8, "♣"), (8, "♦"), (8, "♥"), (3, "♠"), (12, "♣")], "Three of a Kind", Fraction(5, 2))

    def test_two_pair(self):
        self.assertHand([(8, "♣"), (8, "♦"), (4, "♥"), (4, "♠"), (12, "♣")], "Two Pair", 2)

    def test_one_pair(self):
        self.assertHand([(8, "♣"), (8, "♦"), (4, "♥"), (6, "♠"), (12, "♣")], "One Pair", Fraction(3, 2))

    def test_high_card(self):
        self.assertHand([(2, "♣"), (5, "♦"), (9, "♥"), (11, "♠"), (14, "♣")], "High Card", 0)

    def test_rejects_short_hand(self):
        with self.assertRaises(ValueError):
            evaluate_poker_hand(hand((2, "♣"), (3, "♣")))


class DrawTests(unittest.TestCase):
    def test_deck_has_52_distinct_cards(self):
        deck = new_deck()
        self.assertEqual(len(deck), 52)
        self.assertEqual(len(set(deck)), 52)

    def test_poker_hand_is_five_distinct_cards(self):
        rng = random.Random(3)
        for _ in range(200):
            cards = draw_poker_hand(rng)
            self.assertEqual(len(cards), 5)
            self.assertEqual(len(set(cards)), 5)

    def test_slot_spin_uses_known_symbols(self):
        rng = random.Random(5)
        for _ in range(200):
            spin = slot_spin(rng)
            self.assertEqual(len(spin.symbols), 3)
            self.assertTrue(set(spin.symbols) <= set(SLOT_SYMBOLS))
            self.assertEqual(spin.multiplier, slot_multiplier(spin.symbols))

    def test_slot_multipliers(self):
        self.assertEqual(slot_multiplier(("🍒", "🍒", "🍒")), 6)
        self.assertEqual(slot_multiplier(("🍒", "🔔", "🍒")), 3)
        self.assertEqual(slot_multiplier(("🍒", "🔔", "⭐")), 0)

    def test_slot_outcome_labels(self):
        spin = slot_spin(random.Random(0))
        self.assertIn(slot_outcome(spin).label, ("Jackpot", "Two of a kind", "No match"))

    def test_coin_flip_produces_both_sides(self):
        rng = random.Random(11)
        results = {coin_flip(rng).win for _ in range(100)}
        self.assertEqual(results, {True, False})


class SettlementTests(unittest.TestCase):
    def test_total_return_floors(self):
        self.assertEqual(settle(3, Fraction(7, 2)), 10)
        self.assertEqual(settle(5, Fraction(3, 2)), 7)
        self.assertEqual(settle(10, Fraction(2)), 10 * 2)
        self.assertEqual(settle(10, Fraction(0)), 0)

    def test_profit_convention_returns_stake_on_win(self):
        self.assertEqual(settle(10, Fraction(2), PayoutConvention.PROFIT), 30)
        self.assertEqual(settle(10, Fraction(0), PayoutConvention.PROFIT), 0)

    def test_coin_win_doubles_stake_under_both_conventions(self):
        win = CoinFlip(win=True)
        for convention in PayoutConvention:
            outcome = coin_outcome(win, convention)
            self.assertEqual(settle(10, outcome.multiplier, convention), 20)
        loss = coin_outcome(CoinFlip(win=False))
        self.assertEqual(settle(10, loss.multiplier), 0)

    def test_negative_multiplier_rejected(self):
        with self.assertRaises(ValueError):
            settle(10, Fraction(-1))


if __name__ == "__main__":
    unittest.main()
