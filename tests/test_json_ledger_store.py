import json
import os
import shutil
import tempfile
import unittest

from domain.errors import PersistenceFailure
from domain.ledger import Ledger
from domain.models import Account
from infrastructure.config import Settings
from infrastructure.storage.json_ledger_store import JsonLedgerStore


class JsonLedgerStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "balances.json")

    def tearDown(self) -> None:
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_creates_empty_file(self):
        JsonLedgerStore(self.path)
        with open(self.path, encoding="utf-8") as fh:
            self.assertEqual(json.load(fh), {"users": {}})

    def test_saved_layout_matches_file_format(self):
        store = JsonLedgerStore(self.path)
        store.save({"42": Account("42", balance=120, last_daily=1700000000000, inventory=["nickname"])})

        with open(self.path, encoding="utf-8") as fh:
            data = json.load(fh)
        self.assertEqual(
            data,
            {"users": {"42": {"balance": 120, "lastDaily": 1700000000000, "inventory": ["nickname"]}}},
        )
        self.assertEqual(os.listdir(self.tmpdir), ["balances.json"])

    def test_ledger_survives_restart(self):
        ledger = Ledger(JsonLedgerStore(self.path))
        ledger.credit("a", 50)
        ledger.credit("b", 75)
        ledger.add_item("b", "rolecolor")

        reloaded = Ledger(JsonLedgerStore(self.path))
        self.assertEqual(reloaded.balance("a"), 50)
        self.assertEqual(reloaded.get_account("b").inventory, ["rolecolor"])
        self.assertEqual([a.id for a in reloaded.top_balances(2)], ["b", "a"])

    def test_providers_do_not_overwrite_each_other(self):
        settings = Settings()
        discord_path = os.path.join(self.tmpdir, settings.data_file_for("discord"))
        telegram_path = os.path.join(self.tmpdir, settings.data_file_for("telegram"))
        discord_ledger = Ledger(JsonLedgerStore(discord_path))
        telegram_ledger = Ledger(JsonLedgerStore(telegram_path))

        discord_ledger.credit("111", 500)
        telegram_ledger.credit("222", 50)

        self.assertEqual(Ledger(JsonLedgerStore(discord_path)).balance("111"), 500)
        self.assertEqual(Ledger(JsonLedgerStore(telegram_path)).balance("222"), 50)

    def test_reads_legacy_file_with_missing_fields(self):
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump({"users": {"7": {"balance": 9}}}, fh)
        accounts = JsonLedgerStore(self.path).load()
        self.assertEqual(accounts["7"], Account("7", balance=9, last_daily=0, inventory=[]))

    def test_corrupt_file_loads_empty(self):
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write("{not json")
        store = JsonLedgerStore(self.path)
        with self.assertLogs("infrastructure.storage.json_ledger_store", level="ERROR"):
            self.assertEqual(store.load(), {})

    def test_malformed_account_is_skipped(self):
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump({"users": {"1": {"balance": "lots"}, "2": {"balance": 3}}}, fh)
        store = JsonLedgerStore(self.path)
        with self.assertLogs("infrastructure.storage.json_ledger_store", level="WARNING"):
            accounts = store.load()
        self.assertEqual(list(accounts), ["2"])

    def test_save_failure_raises_persistence_failure(self):
        store = JsonLedgerStore(self.path)
        shutil.rmtree(self.tmpdir)
        with self.assertRaises(PersistenceFailure):
            store.save({"1": Account("1", balance=1)})


if __name__ == "__main__":
    unittest.main()
