from __future__ import annotations

import re
import shlex
from typing import List, Optional, Tuple


_CUSTOM_EMOJI_RE = re.compile(r"^<(a?):([A-Za-z0-9_]{2,32}):(\d+)>$")


def split_prefix_command(content: str, prefix: str) -> Optional[Tuple[str, List[str]]]:
    """
    Split `]pay @bob 50` into `("pay", ["@bob", "50"])`.

    Returns None when `content` is not a command. Double-quoted arguments
    are kept together and apostrophes are ordinary characters; unbalanced
    quotes fall back to whitespace splitting.
    """

    if not content or not prefix or not content.startswith(prefix):
        return None
    body = content[len(prefix):].strip()
    if not body:
        return None
    lexer = shlex.shlex(body, posix=True)
    lexer.whitespace_split = True
    lexer.quotes = '"'
    lexer.escape = ""
    lexer.commenters = ""
    try:
        parts = list(lexer)
    except ValueError:
        parts = body.split()
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


def parse_custom_emoji(text: str) -> Optional[Tuple[str, int, bool]]:
    """Return `(name, id, animated)` for a `<:name:id>` / `<a:name:id>` string."""

    match = _CUSTOM_EMOJI_RE.match((text or "").strip())
    if not match:
        return None
    animated, name, emoji_id = match.groups()
    return name, int(emoji_id), bool(animated)


def emoji_cdn_url(emoji_id: int, animated: bool) -> str:
    ext = "gif" if animated else "png"
    return f"https://cdn.discordapp.com/emojis/{emoji_id}.{ext}"
