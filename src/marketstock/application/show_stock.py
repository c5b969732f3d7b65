"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from datetime import date, datetime

from marketstock.application.dto import StockDocumentDTO
from marketstock.domain.exceptions import EntityNotFoundError
from marketstock.domain.model.stock import ShiftName, StockKey
from marketstock.domain.repository.stock_repository import StockRepository


class ShowStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self, document_id: str) -> StockDocumentDTO:
        document = self._stock_repo.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError(f"Stock document '{document_id}' not found")
        return StockDocumentDTO.from_domain(document)

    def handle_by_key(
        self,
        logistics_center_id: str,
        available_date: date | datetime | str,
        shift: str | ShiftName,
    ) -> StockDocumentDTO:
        key = StockKey.of(logistics_center_id, available_date, shift)
        document = self._stock_repo.get_by_key(key)
        if document is None:
            raise EntityNotFoundError(f"No stock document for {key}")
        return StockDocumentDTO.from_domain(document)
