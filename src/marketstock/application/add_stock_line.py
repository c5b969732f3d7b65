"""Application service: Add Stock Line use case.

Called when a farmer's order is approved: the farmer's committed
kilograms become a sellable line on the shift's stock document.

Display fields default to the catalog item's. A missing price is
derived from the item's base price times the retail markup.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from marketstock.application.dto import NewLineSpec, StockLineDTO
from marketstock.domain.exceptions import EntityNotFoundError
from marketstock.domain.model.stock import StockLine
from marketstock.domain.model.value_objects import Money
from marketstock.domain.repository.item_repository import ItemRepository
from marketstock.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class AddStockLineHandler:

    def __init__(
        self,
        stock_repo: StockRepository,
        item_repo: ItemRepository,
        retail_markup: Decimal = Decimal("1.2"),
    ) -> None:
        self._stock_repo = stock_repo
        self._item_repo = item_repo
        self._retail_markup = retail_markup

    def handle(self, document_id: str, spec: NewLineSpec) -> StockLineDTO:
        item = self._item_repo.get_by_id(spec.item_id)
        if item is None:
            raise EntityNotFoundError(f"Item with ID '{spec.item_id}' not found")

        if spec.price_per_unit is not None:
            price = Money.of(spec.price_per_unit)
        else:
            price = item.retail_price(self._retail_markup)

        line = StockLine.create(
            item_id=item.id,
            display_name=spec.display_name or item.name,
            category=spec.category or item.category,
            image_url=spec.image_url if spec.image_url is not None else item.image_url,
            price_per_unit=price,
            original_committed_quantity_kg=spec.original_committed_quantity_kg,
            current_available_quantity_kg=spec.current_available_quantity_kg,
            farmer_order_id=spec.farmer_order_id,
            farmer_id=spec.farmer_id,
            farmer_name=spec.farmer_name,
            farm_name=spec.farm_name,
            farm_logo=spec.farm_logo,
            status=spec.status,
        )
        self._stock_repo.add_line(document_id, line)
        logger.info(
            "Added line %s (%s, %g kg) to stock document %s",
            line.id, line.display_name, line.original_committed_quantity_kg, document_id,
        )
        return StockLineDTO.from_domain(line)
