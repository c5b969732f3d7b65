"""Application service: Adjust Stock use case.

Wraps the StockQuantityAdjuster for callers such as the cart service:
adds to or takes from a line's available kilograms, then reports the
line's new state. A line that reaches zero is marked ``soldout`` unless
the caller opts out.
"""

from __future__ import annotations

from marketstock.application.dto import AdjustmentDTO
from marketstock.domain.exceptions import EntityNotFoundError
from marketstock.domain.repository.stock_repository import StockRepository
from marketstock.domain.service.stock_quantity_adjuster import StockQuantityAdjuster


class AdjustStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo
        self._adjuster = StockQuantityAdjuster(stock_repo)

    def handle(
        self,
        document_id: str,
        line_id: str,
        delta_kg: float,
        enforce_sufficiency: bool = True,
        auto_soldout_on_zero: bool = True,
    ) -> AdjustmentDTO:
        self._adjuster.adjust(
            document_id, line_id, delta_kg, enforce_sufficiency=enforce_sufficiency
        )
        return self._report(document_id, line_id, auto_soldout_on_zero)

    def reserve(
        self, document_id: str, line_id: str, kg: float, auto_soldout_on_zero: bool = True
    ) -> AdjustmentDTO:
        self._adjuster.reserve(document_id, line_id, kg)
        return self._report(document_id, line_id, auto_soldout_on_zero)

    def release(self, document_id: str, line_id: str, kg: float) -> AdjustmentDTO:
        self._adjuster.release(document_id, line_id, kg)
        return self._report(document_id, line_id, auto_soldout_on_zero=False)

    def _report(
        self, document_id: str, line_id: str, auto_soldout_on_zero: bool
    ) -> AdjustmentDTO:
        if auto_soldout_on_zero:
            line = self._stock_repo.mark_soldout_if_exhausted(document_id, line_id)
        else:
            document = self._stock_repo.get_by_id(document_id)
            if document is None:
                raise EntityNotFoundError(
                    f"Stock document '{document_id}' not found after update"
                )
            line = document.get_line(line_id)

        return AdjustmentDTO(
            document_id=document_id,
            line_id=line_id,
            new_quantity_kg=line.current_available_quantity_kg,
            status=line.status.value,
        )
