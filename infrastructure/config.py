from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from application.services import EconomyRules
from domain.models import PayoutConvention


@dataclass(frozen=True)
class Settings:
    """Process configuration, read from the environment (and `.env`)."""

    discord_token: Optional[str] = None
    telegram_token: Optional[str] = None
    tenor_api_key: Optional[str] = None
    owner_id: Optional[str] = None
    data_file: Optional[str] = None
    command_prefix: str = "]"
    starting_balance: int = 0
    daily_reward: int = 500
    daily_cooldown_seconds: int = 24 * 60 * 60
    gamble_cooldown_seconds: int = 10
    http_timeout_seconds: float = 8.0
    command_timeout_seconds: float = 15.0
    payout_convention: PayoutConvention = PayoutConvention.TOTAL_RETURN
    log_level: str = "INFO"
    log_dir: Optional[str] = "logs"

    def data_file_for(self, provider: str) -> str:
        """
        Ledger file for one bot process.

        Each provider gets its own default file: a ledger file belongs to a
        single process, and Discord and Telegram user IDs are separate key
        spaces. An explicit `DATA_FILE` is used as given.
        """

        if self.data_file:
            return self.data_file
        return f"balances.{provider}.json"

    def economy_rules(self) -> EconomyRules:
        return EconomyRules(
            daily_reward=self.daily_reward,
            daily_cooldown_ms=self.daily_cooldown_seconds * 1000,
            gamble_cooldown_ms=self.gamble_cooldown_seconds * 1000,
            payout_convention=self.payout_convention,
        )


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from None
    if value < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}, got {value}.")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}.")
    return value


def _convention(env: Mapping[str, str]) -> PayoutConvention:
    raw = (env.get("PAYOUT_CONVENTION") or PayoutConvention.TOTAL_RETURN.value).strip().lower()
    try:
        return PayoutConvention(raw)
    except ValueError:
        choices = ", ".join(c.value for c in PayoutConvention)
        raise RuntimeError(f"PAYOUT_CONVENTION must be one of {choices}, got {raw!r}.") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from `env`, defaulting to `os.environ` after loading `.env`.

    Malformed values raise `RuntimeError` naming the offending variable.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        discord_token=env.get("DISCORD_TOKEN") or None,
        telegram_token=env.get("TELEGRAM_TOKEN") or None,
        tenor_api_key=env.get("TENOR_API_KEY") or None,
        owner_id=env.get("OWNER_ID") or None,
        data_file=env.get("DATA_FILE") or None,
        command_prefix=env.get("COMMAND_PREFIX") or "]",
        starting_balance=_int(env, "STARTING_BALANCE", 0),
        daily_reward=_int(env, "DAILY_REWARD", 500, minimum=1),
        daily_cooldown_seconds=_int(env, "DAILY_COOLDOWN_SECONDS", 24 * 60 * 60),
        gamble_cooldown_seconds=_int(env, "GAMBLE_COOLDOWN_SECONDS", 10),
        http_timeout_seconds=_float(env, "HTTP_TIMEOUT_SECONDS", 8.0),
        command_timeout_seconds=_float(env, "COMMAND_TIMEOUT_SECONDS", 15.0),
        payout_convention=_convention(env),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_dir=env.get("LOG_DIR", "logs") or None,
    )
