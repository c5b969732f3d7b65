"""Application service: Update Stock Line use case (manual edits)."""

from __future__ import annotations

from marketstock.application.dto import StockLineDTO
from marketstock.domain.exceptions import ValidationError
from marketstock.domain.model.stock import LineStatus
from marketstock.domain.repository.stock_repository import StockRepository


class UpdateStockLineHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(
        self,
        document_id: str,
        line_id: str,
        quantity_kg: float | None = None,
        status: str | LineStatus | None = None,
    ) -> StockLineDTO:
        """Set a line's available quantity and/or status.

        The quantity must stay within ``[0, original committed]``.
        """
        if quantity_kg is None and status is None:
            raise ValidationError("Nothing to update: give a quantity or a status")
        line = self._stock_repo.update_line(
            document_id,
            line_id,
            quantity_kg=quantity_kg,
            status=LineStatus.parse(status) if status is not None else None,
        )
        return StockLineDTO.from_domain(line)
