import random
import unittest

from domain.errors import (
    CooldownActive,
    InsufficientFunds,
    InvalidAmount,
    InvalidTarget,
    ItemNotOwned,
    PersistenceFailure,
)
from domain.ledger import Ledger
from domain.models import Account
from domain.repositories import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    def __init__(self, accounts=None):
        self.accounts = dict(accounts or {})
        self.saves = 0

    def load(self):
        return dict(self.accounts)

    def save(self, accounts) -> None:
        self.saves += 1
        self.accounts = {
            a_id: Account(a.id, a.balance, a.last_daily, list(a.inventory))
            for a_id, a in accounts.items()
        }


class FailingLedgerStore(InMemoryLedgerStore):
    def save(self, accounts) -> None:
        raise PersistenceFailure("disk full")


class LedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryLedgerStore()
        self.ledger = Ledger(self.store, starting_balance=100)

    def test_get_account_creates_with_starting_balance(self):
        account = self.ledger.get_account("42")
        self.assertEqual(account.balance, 100)
        self.assertEqual(account.last_daily, 0)
        self.assertEqual(account.inventory, [])
        self.assertIs(self.ledger.get_account("42"), account)

    def test_loads_existing_accounts(self):
        store = InMemoryLedgerStore({"1": Account("1", balance=7)})
        ledger = Ledger(store, starting_balance=100)
        self.assertEqual(ledger.balance("1"), 7)

    def test_credit_and_debit_persist(self):
        self.assertEqual(self.ledger.credit("a", 50), 150)
        self.assertEqual(self.ledger.debit("a", 30), 120)
        self.assertEqual(self.store.saves, 2)
        self.assertEqual(self.store.accounts["a"].balance, 120)

    def test_non_positive_amounts_are_rejected(self):
        for bad in (0, -5, True, 2.5, "10"):
            with self.assertRaises(InvalidAmount):
                self.ledger.credit("a", bad)
            with self.assertRaises(InvalidAmount):
                self.ledger.debit("a", bad)
        self.assertEqual(self.ledger.balance("a"), 100)
        self.assertEqual(self.store.saves, 0)

    def test_debit_beyond_balance_leaves_balance_unchanged(self):
        with self.assertRaises(InsufficientFunds):
            self.ledger.debit("a", 101)
        self.assertEqual(self.ledger.balance("a"), 100)

    def test_balance_never_negative_under_random_operations(self):
        rng = random.Random(1234)
        ids = ["a", "b", "c"]
        for _ in range(500):
            amount = rng.randint(1, 80)
            try:
                if rng.random() < 0.5:
                    self.ledger.debit(rng.choice(ids), amount)
                else:
                    self.ledger.transfer(rng.choice(ids), rng.choice(ids), amount)
            except (InsufficientFunds, InvalidTarget):
                pass
            for account_id in ids:
                self.assertGreaterEqual(self.ledger.balance(account_id), 0)

    def test_transfer_moves_both_balances(self):
        self.ledger.transfer("a", "b", 40)
        self.assertEqual(self.ledger.balance("a"), 60)
        self.assertEqual(self.ledger.balance("b"), 140)

    def test_transfer_is_all_or_nothing(self):
        with self.assertRaises(InsufficientFunds):
            self.ledger.transfer("a", "b", 500)
        self.assertEqual(self.ledger.balance("a"), 100)
        self.assertEqual(self.ledger.balance("b"), 100)

    def test_transfer_to_self_is_rejected(self):
        with self.assertRaises(InvalidTarget):
            self.ledger.transfer("a", "a", 10)
        self.assertEqual(self.ledger.balance("a"), 100)

    def test_claim_daily_respects_cooldown_boundary(self):
        cooldown, reward, t = 1000, 500, 10_000
        self.ledger.get_account("a").last_daily = t

        with self.assertRaises(CooldownActive) as caught:
            self.ledger.claim_daily("a", now=t + cooldown - 1, cooldown_ms=cooldown, reward=reward)
        self.assertEqual(caught.exception.remaining_ms, 1)
        self.assertEqual(self.ledger.balance("a"), 100)

        new_balance = self.ledger.claim_daily("a", now=t + cooldown, cooldown_ms=cooldown, reward=reward)
        self.assertEqual(new_balance, 600)
        self.assertEqual(self.ledger.get_account("a").last_daily, t + cooldown)

    def test_first_daily_claim_always_succeeds(self):
        self.assertEqual(self.ledger.claim_daily("a", now=5, cooldown_ms=1000, reward=500), 600)

    def test_items_append_and_remove_first_match(self):
        self.ledger.add_item("a", "nickname")
        self.ledger.add_item("a", "rolecolor")
        self.ledger.add_item("a", "nickname")
        self.ledger.remove_item("a", "nickname")
        self.assertEqual(self.ledger.get_account("a").inventory, ["rolecolor", "nickname"])

    def test_remove_missing_item_raises(self):
        with self.assertRaises(ItemNotOwned):
            self.ledger.remove_item("a", "customemoji")

    def test_top_balances_is_stable(self):
        ledger = Ledger(InMemoryLedgerStore())
        for account_id, amount in (("w", 10), ("x", 50), ("y", 50), ("z", 5)):
            ledger.credit(account_id, amount)

        top = ledger.top_balances(3)
        self.assertEqual([a.id for a in top], ["x", "y", "w"])
        self.assertEqual(ledger.top_balances(0), [])
        self.assertEqual(len(ledger.top_balances(10)), 4)

    def test_persist_failure_is_logged_and_memory_kept(self):
        ledger = Ledger(FailingLedgerStore(), starting_balance=10)
        with self.assertLogs("domain.ledger", level="ERROR"):
            ledger.credit("a", 5)
        self.assertEqual(ledger.balance("a"), 15)
        self.assertFalse(ledger.persist())


if __name__ == "__main__":
    unittest.main()
