from __future__ import annotations

from typing import Tuple

from .errors import UnknownItem
from .models import ShopItem


CATALOG: Tuple[ShopItem, ...] = (
    ShopItem(id="rolecolor", name="Role Color Change", price=500),
    ShopItem(id="nickname", name="Nickname Change", price=250),
    ShopItem(id="customemoji", name="Custom Emoji Slot", price=1000),
)


def find_item(item_id: str) -> ShopItem:
    wanted = (item_id or "").strip().lower()
    for item in CATALOG:
        if item.id == wanted:
            return item
    raise UnknownItem(item_id)
