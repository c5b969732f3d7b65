"""Catalog items: the produce a stock line can offer.

A stock line copies the item's display fields and a retail price at the
moment it is added; later catalog changes do not touch published lines.
Item ids are sequential integers kept as strings.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from marketstock.domain.exceptions import ValidationError
from marketstock.domain.model.value_objects import Money


def next_item_id(items: Iterable[Item]) -> str:
    return str(max((int(i.id) for i in items), default=0) + 1)


def _require_positive(price: Money) -> Money:
    if price.amount <= 0:
        raise ValidationError("Item price must be greater than zero")
    return price


@dataclass
class Item:
    id: str
    name: str
    category: str
    base_price: Money
    image_url: str | None = None

    @classmethod
    def create(
        cls,
        item_id: str,
        name: str,
        category: str,
        base_price: Money,
        image_url: str | None = None,
    ) -> Item:
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        if not category or not category.strip():
            raise ValidationError("Item category is required")
        return cls(
            id=item_id,
            name=name.strip(),
            category=category.strip(),
            base_price=_require_positive(base_price),
            image_url=image_url or None,
        )

    def is_named(self, name: str) -> bool:
        return self.name.casefold() == name.strip().casefold()

    def retail_price(self, markup: Decimal) -> Money:
        """Per-kilogram price offered on a new stock line."""
        return self.base_price.marked_up(markup)

    def reprice(self, new_price: Money) -> None:
        self.base_price = _require_positive(new_price)
