"""Application service: reprice a catalog item.

Only lines added afterwards see the new price; published lines keep the
price they were created with.
"""

from __future__ import annotations

import logging

from marketstock.domain.model.item import Item
from marketstock.domain.model.value_objects import Money
from marketstock.domain.repository.item_repository import ItemRepository

logger = logging.getLogger(__name__)


class UpdateItemPriceHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, item_id: str, new_price: str) -> Item:
        item = self._item_repo.set_price(item_id, Money.of(new_price))
        logger.info("Item %s repriced to %s/kg", item.id, item.base_price)
        return item
