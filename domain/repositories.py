from __future__ import annotations

import enum
from typing import Dict, Optional, Protocol

from .models import Account


class LedgerStore(Protocol):
    """
    Abstraction over ledger persistence.

    Implementations are responsible for:
    - Mapping between the storage layout and the `Account` domain model.
    - Writing the whole ledger on every save; there are no partial writes.
    """

    def load(self) -> Dict[str, Account]:
        """Return every stored account keyed by actor ID, in stored order."""

        ...

    def save(self, accounts: Dict[str, Account]) -> None:
        """
        Persist the full set of accounts.

        Implementations raise `PersistenceFailure` when the write fails.
        """

        ...


class ContentKind(enum.Enum):
    JOKE = "joke"
    MEME = "meme"
    CAT = "cat"
    DOG = "dog"
    QUOTE = "quote"
    FACT = "fact"
    GIF = "gif"


class ContentProvider(Protocol):
    """
    Third-party content (jokes, images, gifs...) as seen by the application.

    `None` means the upstream answered but had nothing to offer; transport
    failures and timeouts raise `ExternalServiceUnavailable`.
    """

    async def fetch_content(
        self,
        kind: ContentKind,
        keyword: Optional[str] = None,
    ) -> Optional[str]:
        ...


class PermissionOracle(Protocol):
    def has_manage_permission(self, actor_id: str, guild_id: Optional[str]) -> bool:
        """Return True if the actor may run privileged commands."""

        ...
