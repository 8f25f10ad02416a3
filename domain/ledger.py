from __future__ import annotations

import logging
from typing import Dict, List

from .errors import (
    CooldownActive,
    InsufficientFunds,
    InvalidAmount,
    InvalidTarget,
    ItemNotOwned,
    PersistenceFailure,
)
from .models import Account
from .repositories import LedgerStore


logger = logging.getLogger(__name__)


def _validate_positive_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount()


class Ledger:
    """
    In-memory map of actor ID -> `Account`, backed by a `LedgerStore`.

    The ledger is loaded once and flushed after every mutating operation.
    Every operation validates first and only then mutates, so a rejected
    call leaves all accounts untouched. None of the methods await, which
    keeps each read-modify-write atomic on the event loop.
    """

    def __init__(self, store: LedgerStore, starting_balance: int = 0) -> None:
        if starting_balance < 0:
            raise ValueError("starting_balance must not be negative")
        self._store = store
        self._starting_balance = starting_balance
        self._accounts: Dict[str, Account] = dict(store.load())

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: str) -> bool:
        return str(account_id) in self._accounts

    def get_account(self, account_id: str) -> Account:
        """Return the account for `account_id`, creating it with defaults if needed."""

        account_id = str(account_id)
        account = self._accounts.get(account_id)
        if account is None:
            account = Account(id=account_id, balance=self._starting_balance)
            self._accounts[account_id] = account
        return account

    def balance(self, account_id: str) -> int:
        return self.get_account(account_id).balance

    def credit(self, account_id: str, amount: int) -> int:
        _validate_positive_amount(amount)
        account = self.get_account(account_id)
        account.balance += amount
        self.persist()
        return account.balance

    def debit(self, account_id: str, amount: int) -> int:
        _validate_positive_amount(amount)
        account = self.get_account(account_id)
        if account.balance < amount:
            raise InsufficientFunds(account.balance, amount)
        account.balance -= amount
        self.persist()
        return account.balance

    def transfer(self, from_id: str, to_id: str, amount: int) -> None:
        """
        Move `amount` from one account to another.

        Both balances change or neither does; the debit checks run before
        any account is touched.
        """

        from_id, to_id = str(from_id), str(to_id)
        if from_id == to_id:
            raise InvalidTarget("You can't pay yourself.")
        _validate_positive_amount(amount)

        source = self.get_account(from_id)
        if source.balance < amount:
            raise InsufficientFunds(source.balance, amount)
        target = self.get_account(to_id)

        source.balance -= amount
        target.balance += amount
        self.persist()

    def claim_daily(
        self,
        account_id: str,
        now: int,
        cooldown_ms: int,
        reward: int,
    ) -> int:
        """Credit the daily reward unless it was claimed within `cooldown_ms`."""

        _validate_positive_amount(reward)
        account = self.get_account(account_id)
        elapsed = now - account.last_daily
        if account.last_daily and elapsed < cooldown_ms:
            raise CooldownActive(cooldown_ms - elapsed, action="`daily`")

        account.balance += reward
        account.last_daily = now
        self.persist()
        return account.balance

    def add_item(self, account_id: str, item_id: str) -> None:
        self.get_account(account_id).inventory.append(item_id)
        self.persist()

    def remove_item(self, account_id: str, item_id: str) -> None:
        account = self.get_account(account_id)
        try:
            account.inventory.remove(item_id)
        except ValueError:
            raise ItemNotOwned(item_id) from None
        self.persist()

    def top_balances(self, n: int) -> List[Account]:
        """Return up to `n` accounts, richest first; ties keep insertion order."""

        if n <= 0:
            return []
        ranked = sorted(self._accounts.values(), key=lambda a: a.balance, reverse=True)
        return ranked[:n]

    def persist(self) -> bool:
        """
        Flush the whole ledger to the store.

        Failures are logged and swallowed: the in-memory state stays
        authoritative until the process restarts.
        """

        try:
            self._store.save(self._accounts)
        except PersistenceFailure as exc:
            logger.error("Ledger persist failed, keeping in-memory state: %s", exc)
            return False
        return True
