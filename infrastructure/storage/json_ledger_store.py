from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Dict

from domain.errors import PersistenceFailure
from domain.models import Account
from domain.repositories import LedgerStore


logger = logging.getLogger(__name__)


class JsonLedgerStore(LedgerStore):
    """
    Flat-file implementation of `LedgerStore`.

    Layout: {"users": {"<id>": {"balance": int, "lastDaily": ms, "inventory": [str]}}}.
    The file is self-initialising and every save replaces it atomically
    (temp file in the same directory, fsync, rename).
    """

    def __init__(self, path: str) -> None:
        self._path = os.path.abspath(path)
        self._ensure_file()

    @property
    def path(self) -> str:
        return self._path

    def _ensure_file(self) -> None:
        if os.path.exists(self._path):
            return
        directory = os.path.dirname(self._path)
        os.makedirs(directory, exist_ok=True)
        try:
            self._write({"users": {}})
        except OSError as exc:
            logger.error("Could not create ledger file %s: %s", self._path, exc)

    @staticmethod
    def _to_domain(account_id: str, row: Dict[str, Any]) -> Account:
        return Account(
            id=str(account_id),
            balance=max(0, int(row.get("balance", 0))),
            last_daily=int(row.get("lastDaily", 0) or 0),
            inventory=[str(item) for item in row.get("inventory", [])],
        )

    @staticmethod
    def _to_row(account: Account) -> Dict[str, Any]:
        return {
            "balance": account.balance,
            "lastDaily": account.last_daily,
            "inventory": list(account.inventory),
        }

    def load(self) -> Dict[str, Account]:
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.error("Failed to load ledger file %s, starting empty: %s", self._path, exc)
            return {}

        users = data.get("users") if isinstance(data, dict) else None
        if not isinstance(users, dict):
            logger.warning("Ledger file %s has no 'users' object, starting empty", self._path)
            return {}

        accounts: Dict[str, Account] = {}
        for account_id, row in users.items():
            try:
                accounts[str(account_id)] = self._to_domain(account_id, row)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed account %s: %s", account_id, exc)
        return accounts

    def save(self, accounts: Dict[str, Account]) -> None:
        payload = {"users": {a_id: self._to_row(a) for a_id, a in accounts.items()}}
        try:
            self._write(payload)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceFailure(f"Failed to save ledger to {self._path}: {exc}") from exc

    def _write(self, payload: Dict[str, Any]) -> None:
        directory = os.path.dirname(self._path)
        fd, tmp_path = tempfile.mkstemp(prefix=".ledger-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
