from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from domain.ledger import Ledger
from domain.models import PayoutConvention
from domain.repositories import ContentProvider, PermissionOracle

from .cooldowns import GambleCooldowns


DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class EconomyRules:
    """Tunable numbers of the economy; defaults mirror the original bot."""

    daily_reward: int = 500
    daily_cooldown_ms: int = DAY_MS
    gamble_cooldown_ms: int = 10 * 1000
    payout_convention: PayoutConvention = PayoutConvention.TOTAL_RETURN
    leaderboard_size: int = 10


class OwnerPermissions(PermissionOracle):
    """
    Permission oracle that only trusts the configured bot owner.

    Guild roles are not consulted; every privileged command in the bot is
    owner-gated.
    """

    def __init__(self, owner_id: Optional[str]) -> None:
        self._owner_id = str(owner_id) if owner_id else None

    def has_manage_permission(self, actor_id: str, guild_id: Optional[str] = None) -> bool:
        return self._owner_id is not None and str(actor_id) == self._owner_id


@dataclass
class Services:
    """
    Everything a command handler may touch.

    Passed explicitly to every handler so tests can build a fresh ledger,
    a fake content provider and a seeded RNG per test case.
    """

    ledger: Ledger
    content: ContentProvider
    permissions: PermissionOracle
    rules: EconomyRules = field(default_factory=EconomyRules)
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], int] = now_ms
    cooldowns: Optional[GambleCooldowns] = None

    def __post_init__(self) -> None:
        if self.cooldowns is None:
            self.cooldowns = GambleCooldowns(self.rules.gamble_cooldown_ms)
