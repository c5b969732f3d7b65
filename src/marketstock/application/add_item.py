"""Application service: Add Item use case (catalog)."""

from __future__ import annotations

from marketstock.domain.model.item import Item
from marketstock.domain.model.value_objects import Money
from marketstock.domain.repository.item_repository import ItemRepository


class AddItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(
        self, name: str, category: str, price: str, image_url: str | None = None
    ) -> Item:
        """Add a produce item; the store assigns its id."""
        return self._item_repo.add(
            name=name,
            category=category,
            base_price=Money.of(price),
            image_url=image_url,
        )
