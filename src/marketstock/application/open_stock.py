"""Application service: Open Stock use case.

Publishing a shift starts by making sure its stock document exists.
Opening the same center/date/shift twice returns the same document.
"""

from __future__ import annotations

from datetime import date, datetime

from marketstock.application.dto import StockDocumentDTO
from marketstock.domain.model.stock import ShiftName, StockKey
from marketstock.domain.repository.stock_repository import StockRepository


class OpenStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(
        self,
        logistics_center_id: str,
        available_date: date | datetime | str,
        shift: str | ShiftName,
        created_by_id: str | None = None,
    ) -> StockDocumentDTO:
        key = StockKey.of(logistics_center_id, available_date, shift)
        document = self._stock_repo.find_or_create(key, created_by_id=created_by_id)
        return StockDocumentDTO.from_domain(document)
