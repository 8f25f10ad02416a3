from __future__ import annotations

import logging

from application.router import CommandRouter, build_router
from application.services import OwnerPermissions, Services
from domain.ledger import Ledger
from infrastructure.config import Settings
from infrastructure.content.http_content_provider import HttpContentProvider
from infrastructure.storage.json_ledger_store import JsonLedgerStore


logger = logging.getLogger(__name__)


def build_application(settings: Settings, provider: str) -> CommandRouter:
    """Wire store -> ledger -> services -> router for one chat provider."""

    store = JsonLedgerStore(settings.data_file_for(provider))
    ledger = Ledger(store, starting_balance=settings.starting_balance)
    logger.info("Loaded %d accounts from %s", len(ledger), store.path)

    services = Services(
        ledger=ledger,
        content=HttpContentProvider(
            tenor_api_key=settings.tenor_api_key,
            timeout_seconds=settings.http_timeout_seconds,
        ),
        permissions=OwnerPermissions(settings.owner_id),
        rules=settings.economy_rules(),
    )
    if not settings.tenor_api_key:
        logger.warning("TENOR_API_KEY is not set; gif commands will find nothing.")
    return build_router(services, timeout_seconds=settings.command_timeout_seconds)
