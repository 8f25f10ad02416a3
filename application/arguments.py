from __future__ import annotations

import re
from typing import Any

from domain.errors import CoinbotError, InvalidAmount

from .context import UserRef


_MENTION_RE = re.compile(r"^<@!?(\d+)>$")


class BadArgument(CoinbotError):
    pass


def parse_amount(value: Any) -> int:
    """Accept an int or a string of digits; anything else is `InvalidAmount`."""

    if isinstance(value, bool):
        raise InvalidAmount()
    if isinstance(value, int):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        if not (text.isascii() and text.isdigit()):
            raise InvalidAmount()
        try:
            amount = int(text)
        except ValueError:
            # Longer than the interpreter's int conversion limit.
            raise InvalidAmount() from None
    if amount <= 0:
        raise InvalidAmount()
    return amount


def parse_user(value: Any) -> UserRef:
    """Resolve a user argument from a `UserRef`, a `<@id>` mention or a bare ID."""

    if isinstance(value, UserRef):
        return value
    text = str(value).strip()
    match = _MENTION_RE.match(text)
    if match:
        return UserRef(id=match.group(1))
    if text.isdigit():
        return UserRef(id=text)
    raise BadArgument(f"`{text}` is not a user. Mention someone or pass their ID.")
