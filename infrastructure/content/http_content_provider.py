from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional

import aiohttp

from domain.errors import ExternalServiceUnavailable
from domain.repositories import ContentKind, ContentProvider


logger = logging.getLogger(__name__)

TENOR_SEARCH_URL = "https://tenor.googleapis.com/v2/search"

ENDPOINTS: Dict[ContentKind, str] = {
    ContentKind.JOKE: "https://official-joke-api.appspot.com/random_joke",
    ContentKind.MEME: "https://meme-api.com/gimme",
    ContentKind.CAT: "https://api.thecatapi.com/v1/images/search",
    ContentKind.DOG: "https://dog.ceo/api/breeds/image/random",
    ContentKind.QUOTE: "https://zenquotes.io/api/random",
    ContentKind.FACT: "https://uselessfacts.jsph.pl/api/v2/facts/random?language=en",
}

SERVICE_NAMES: Dict[ContentKind, str] = {
    ContentKind.JOKE: "The joke service",
    ContentKind.MEME: "The meme service",
    ContentKind.CAT: "The cat service",
    ContentKind.DOG: "The dog service",
    ContentKind.QUOTE: "The quote service",
    ContentKind.FACT: "The fact service",
    ContentKind.GIF: "The GIF service",
}


def pick_tenor_url(results: List[Dict[str, Any]], rng: random.Random) -> Optional[str]:
    """
    Pick one Tenor search result and return its best media URL.

    Preference: `gif`, then `mediumgif`, then any other format, then the
    result's page URL.
    """

    if not results:
        return None
    pick = rng.choice(results) or {}
    formats = pick.get("media_formats") or {}
    for name in ("gif", "mediumgif"):
        url = (formats.get(name) or {}).get("url")
        if url:
            return url
    for media in formats.values():
        url = (media or {}).get("url")
        if url:
            return url
    return pick.get("url") or None


def extract_content(kind: ContentKind, payload: Any) -> Optional[str]:
    """Turn an upstream JSON payload into the single string the bot shows."""

    if kind is ContentKind.JOKE and isinstance(payload, dict):
        setup, punchline = payload.get("setup"), payload.get("punchline")
        if setup and punchline:
            return f"{setup}\n||{punchline}||"
        return None
    if kind is ContentKind.MEME and isinstance(payload, dict):
        return payload.get("url") or None
    if kind is ContentKind.CAT and isinstance(payload, list) and payload:
        return (payload[0] or {}).get("url") or None
    if kind is ContentKind.DOG and isinstance(payload, dict):
        if payload.get("status") == "success":
            return payload.get("message") or None
        return None
    if kind is ContentKind.QUOTE and isinstance(payload, list) and payload:
        entry = payload[0] or {}
        text, author = entry.get("q"), entry.get("a")
        if text:
            return f"{text} - {author}" if author else text
        return None
    if kind is ContentKind.FACT and isinstance(payload, dict):
        return payload.get("text") or None
    return None


class HttpContentProvider(ContentProvider):
    """
    `ContentProvider` backed by public JSON APIs, fetched with aiohttp.

    Every request is bounded by `timeout_seconds`. Connection errors,
    timeouts and non-200 answers raise `ExternalServiceUnavailable`; an
    answer without usable content returns None.
    """

    def __init__(
        self,
        tenor_api_key: Optional[str] = None,
        timeout_seconds: float = 8.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._tenor_api_key = tenor_api_key
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._rng = rng or random.Random()

    async def _get_json(self, kind: ContentKind, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        service = SERVICE_NAMES[kind]
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, params=params) as resp:
                    if resp.status != 200:
                        logger.warning("%s answered HTTP %s", service, resp.status)
                        raise ExternalServiceUnavailable(service)
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning("%s request failed: %s", service, exc)
            raise ExternalServiceUnavailable(service) from exc

    async def fetch_content(
        self,
        kind: ContentKind,
        keyword: Optional[str] = None,
    ) -> Optional[str]:
        if kind is ContentKind.GIF:
            return await self._search_gif(keyword or "")

        payload = await self._get_json(kind, ENDPOINTS[kind])
        return extract_content(kind, payload)

    async def _search_gif(self, keyword: str) -> Optional[str]:
        if not self._tenor_api_key or not keyword.strip():
            return None
        params = {"q": keyword, "key": self._tenor_api_key, "limit": 20}
        payload = await self._get_json(ContentKind.GIF, TENOR_SEARCH_URL, params)
        results = payload.get("results") if isinstance(payload, dict) else None
        return pick_tenor_url(results or [], self._rng)
