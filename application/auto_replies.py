from __future__ import annotations

import re
from typing import Optional, Pattern, Tuple


AUTO_REPLIES: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"good morning", re.IGNORECASE), "Good morning! ☀️"),
    (re.compile(r"welcome", re.IGNORECASE), "Welcome! 🎉"),
)


def auto_reply(text: str) -> Optional[str]:
    """Return the canned reply for the first keyword found in `text`, if any."""

    if not text:
        return None
    for pattern, reply in AUTO_REPLIES:
        if pattern.search(text):
            return reply
    return None
