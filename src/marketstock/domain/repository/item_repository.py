"""Abstract repository for the Item catalog.

Like the stock store, the catalog has no generic ``save``: new items and
price changes go through ``add`` and ``set_price``, each of which checks
and writes in one step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from marketstock.domain.model.item import Item
from marketstock.domain.model.value_objects import Money


class ItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Item | None:
        """Return an item by its name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item in the catalog, in id order."""

    @abstractmethod
    def add(
        self,
        name: str,
        category: str,
        base_price: Money,
        image_url: str | None = None,
    ) -> Item:
        """Store a new item under the next sequential id.

        Raises ValidationError if the name is already taken or a field is
        invalid.
        """

    @abstractmethod
    def set_price(self, item_id: str, new_price: Money) -> Item:
        """Change an item's base price. Raises EntityNotFoundError if unknown."""
