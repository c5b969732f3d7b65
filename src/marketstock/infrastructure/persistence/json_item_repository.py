"""JSON-file-backed implementation of ItemRepository.

Shares the file locking and atomic writes of the stock store; the
duplicate-name check and id assignment happen under the file lock.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

from marketstock.domain.exceptions import EntityNotFoundError, ValidationError
from marketstock.domain.model.item import Item, next_item_id
from marketstock.domain.model.value_objects import Money
from marketstock.domain.repository.item_repository import ItemRepository
from marketstock.infrastructure.persistence.json_file import JsonFile

logger = logging.getLogger(__name__)


class JsonItemRepository(ItemRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, item_id: str) -> Item | None:
        return next((i for i in self.list_all() if i.id == item_id), None)

    def get_by_name(self, name: str) -> Item | None:
        return next((i for i in self.list_all() if i.is_named(name)), None)

    def list_all(self) -> list[Item]:
        with self._file.lock:
            records = self._file.read()
        return sorted((_to_domain(raw) for raw in records), key=lambda i: int(i.id))

    def add(
        self,
        name: str,
        category: str,
        base_price: Money,
        image_url: str | None = None,
    ) -> Item:
        with self._file.lock:
            records = self._file.read()
            items = [_to_domain(raw) for raw in records]
            if name and any(i.is_named(name) for i in items):
                raise ValidationError(f"Item '{name.strip()}' already exists")
            item = Item.create(next_item_id(items), name, category, base_price, image_url)
            records.append(_to_raw(item))
            self._file.write(records)
        logger.info("Added catalog item %s (%s)", item.id, item.name)
        return item

    def set_price(self, item_id: str, new_price: Money) -> Item:
        with self._file.lock:
            records = self._file.read()
            for index, raw in enumerate(records):
                if raw["id"] == item_id:
                    item = _to_domain(raw)
                    item.reprice(new_price)
                    records[index] = _to_raw(item)
                    self._file.write(records)
                    return item
        raise EntityNotFoundError(f"Item with ID '{item_id}' not found")


def _to_raw(item: Item) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "base_price": str(item.base_price.amount),
        "currency": item.base_price.currency,
        "image_url": item.image_url,
    }


def _to_domain(raw: dict) -> Item:
    return Item(
        id=raw["id"],
        name=raw["name"],
        category=raw["category"],
        base_price=Money(Decimal(raw["base_price"]), raw.get("currency", "USD")),
        image_url=raw.get("image_url"),
    )
