import unittest

from domain.models import PayoutConvention
from infrastructure.config import Settings, load_settings


class LoadSettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings({})
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.command_prefix, "]")
        self.assertEqual(settings.starting_balance, 0)

        rules = settings.economy_rules()
        self.assertEqual(rules.daily_reward, 500)
        self.assertEqual(rules.daily_cooldown_ms, 24 * 60 * 60 * 1000)
        self.assertEqual(rules.gamble_cooldown_ms, 10_000)
        self.assertIs(rules.payout_convention, PayoutConvention.TOTAL_RETURN)

    def test_each_provider_gets_its_own_ledger_file(self):
        settings = load_settings({})
        self.assertEqual(settings.data_file_for("discord"), "balances.discord.json")
        self.assertEqual(settings.data_file_for("telegram"), "balances.telegram.json")

        settings = load_settings({"DATA_FILE": "/var/lib/coinbot/shared.json"})
        self.assertEqual(settings.data_file_for("discord"), "/var/lib/coinbot/shared.json")

    def test_overrides(self):
        settings = load_settings(
            {
                "DISCORD_TOKEN": "abc",
                "OWNER_ID": "99",
                "STARTING_BALANCE": "200",
                "GAMBLE_COOLDOWN_SECONDS": "3",
                "PAYOUT_CONVENTION": "Profit",
                "LOG_LEVEL": "debug",
                "LOG_DIR": "",
            }
        )
        self.assertEqual(settings.discord_token, "abc")
        self.assertEqual(settings.owner_id, "99")
        self.assertEqual(settings.starting_balance, 200)
        self.assertEqual(settings.economy_rules().gamble_cooldown_ms, 3000)
        self.assertIs(settings.payout_convention, PayoutConvention.PROFIT)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertIsNone(settings.log_dir)

    def test_malformed_values_name_the_variable(self):
        for env in (
            {"STARTING_BALANCE": "many"},
            {"STARTING_BALANCE": "-5"},
            {"DAILY_REWARD": "0"},
            {"HTTP_TIMEOUT_SECONDS": "soon"},
            {"PAYOUT_CONVENTION": "double"},
        ):
            with self.assertRaises(RuntimeError) as caught:
                load_settings(env)
            self.assertIn(next(iter(env)), str(caught.exception))


if __name__ == "__main__":
    unittest.main()
