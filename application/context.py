from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple


@dataclass
class ActorContext:
    """
    Information about the caller from a particular channel (Discord, Telegram).

    The application layer never depends on concrete SDK types; it only sees
    this small context object. `name_lookup` lets the adapter resolve other
    actor IDs to display names (e.g. for the leaderboard).
    """

    provider: str
    actor_id: str
    display_name: str
    guild_id: Optional[str] = None
    latency_ms: Optional[float] = None
    name_lookup: Optional[Callable[[str], Optional[str]]] = None

    def name_for(self, actor_id: str) -> str:
        if actor_id == self.actor_id:
            return self.display_name
        if self.name_lookup is not None:
            name = self.name_lookup(actor_id)
            if name:
                return name
        return f"User {actor_id}"


@dataclass(frozen=True)
class UserRef:
    """A user passed as a command argument (mention, reply, raw ID)."""

    id: str
    display_name: Optional[str] = None


@dataclass
class RichMessage:
    title: str
    description: str = ""
    image_url: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class Reply:
    """
    A single response to one command.

    Either `text`, `embed` or both may be set; adapters render whatever
    their platform supports.
    """

    text: Optional[str] = None
    embed: Optional[RichMessage] = None
    ephemeral: bool = False

    @classmethod
    def plain(cls, text: str) -> "Reply":
        return cls(text=text)

    @classmethod
    def rich(
        cls,
        title: str,
        description: str = "",
        image_url: Optional[str] = None,
        fields: Optional[List[Tuple[str, str]]] = None,
    ) -> "Reply":
        return cls(
            embed=RichMessage(
                title=title,
                description=description,
                image_url=image_url,
                fields=list(fields or []),
            )
        )

    def as_text(self) -> str:
        """Flatten the reply for channels without rich messages."""

        parts: List[str] = []
        if self.text:
            parts.append(self.text)
        if self.embed is not None:
            if self.embed.title:
                parts.append(self.embed.title)
            if self.embed.description:
                parts.append(self.embed.description)
            parts.extend(f"{name}: {value}" for name, value in self.embed.fields)
            if self.embed.image_url:
                parts.append(self.embed.image_url)
        return "\n".join(parts)
