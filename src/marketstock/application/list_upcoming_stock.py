"""Application service: upcoming stock listings (queries).

``handle`` lists a center's documents from a date onwards.
``shifts_with_stock`` takes the shift slots a caller is about to offer
(computed by the shift calendar, outside this package) and keeps those
that actually have something to sell.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from marketstock.application.dto import ShiftStockDTO, StockDocumentDTO
from marketstock.domain.exceptions import ValidationError
from marketstock.domain.model.stock import ShiftName, StockKey, normalize_date
from marketstock.domain.repository.stock_repository import StockRepository


class ListUpcomingStockHandler:

    def __init__(self, stock_repo: StockRepository, default_count: int = 6) -> None:
        self._stock_repo = stock_repo
        self._default_count = default_count

    def handle(
        self,
        logistics_center_id: str,
        from_date: date | datetime | str | None = None,
        count: int | None = None,
    ) -> list[StockDocumentDTO]:
        limit = self._default_count if count is None else count
        if limit <= 0:
            raise ValidationError("Count must be positive")
        start = (
            normalize_date(from_date)
            if from_date is not None
            else datetime.now(timezone.utc).date()
        )
        documents = self._stock_repo.list_upcoming(logistics_center_id, start, limit)
        return [StockDocumentDTO.from_domain(d) for d in documents]

    def shifts_with_stock(
        self,
        logistics_center_id: str,
        slots: list[tuple[date | str, str | ShiftName]],
    ) -> list[ShiftStockDTO]:
        result: list[ShiftStockDTO] = []
        for slot_date, shift in slots:
            key = StockKey.of(logistics_center_id, slot_date, shift)
            document = self._stock_repo.get_by_key(key)
            if document is not None and document.has_lines:
                result.append(
                    ShiftStockDTO(
                        date=key.available_date.isoformat(),
                        shift=key.shift.value,
                        document_id=document.id,
                    )
                )
        return result
