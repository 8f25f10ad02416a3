from __future__ import annotations

from typing import Dict

from domain.errors import CooldownActive


class GambleCooldowns:
    """
    Fixed-window, per-actor rate limit.

    The map lives in process memory only and is reset on restart.
    """

    def __init__(self, window_ms: int, action: str = "`gamble`") -> None:
        self.window_ms = window_ms
        self._action = action
        self._last: Dict[str, int] = {}

    def check(self, actor_id: str, now: int) -> None:
        last = self._last.get(actor_id)
        if last is None:
            return
        elapsed = now - last
        if elapsed < self.window_ms:
            raise CooldownActive(self.window_ms - elapsed, action=self._action)

    def record(self, actor_id: str, now: int) -> None:
        self._last[actor_id] = now

    def reset(self, actor_id: str) -> None:
        self._last.pop(actor_id, None)
