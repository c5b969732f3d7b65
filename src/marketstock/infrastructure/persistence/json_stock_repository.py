"""JSON-file-backed implementation of StockRepository.

Every operation runs under a lock shared by all repositories pointing at
the same file, and every write replaces the file atomically. A change is
read, checked and written while the lock is held, so concurrent threads
in one process never interleave a check with another thread's write.
Use the SQL store when several processes share the data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import TypeVar

from marketstock.domain.exceptions import EntityNotFoundError
from marketstock.domain.model.stock import (
    LineStatus,
    ShiftName,
    StockDocument,
    StockKey,
    StockLine,
)
from marketstock.domain.model.value_objects import KilogramDelta, Money
from marketstock.domain.repository.stock_repository import StockRepository
from marketstock.infrastructure.persistence.json_file import JsonFile

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonStockRepository(StockRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- StockRepository interface --------------------------------------------

    def get_by_id(self, document_id: str) -> StockDocument | None:
        with self._file.lock:
            raw = self._find_raw(self._file.read(), document_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_key(self, key: StockKey) -> StockDocument | None:
        with self._file.lock:
            records = self._file.read()
        for raw in records:
            if self._key_of(raw) == key:
                return self._to_domain(raw)
        return None

    def find_or_create(
        self, key: StockKey, created_by_id: str | None = None
    ) -> StockDocument:
        with self._file.lock:
            records = self._file.read()
            for raw in records:
                if self._key_of(raw) == key:
                    return self._to_domain(raw)
            document = StockDocument.create(key, created_by_id=created_by_id)
            records.append(self._to_raw(document))
            self._file.write(records)
        logger.info("Created stock document %s for %s", document.id, key)
        return document

    def list_upcoming(
        self, logistics_center_id: str, from_date: date, count: int
    ) -> list[StockDocument]:
        with self._file.lock:
            records = self._file.read()
        documents = [
            self._to_domain(raw)
            for raw in records
            if raw["logistics_center_id"] == logistics_center_id
            and date.fromisoformat(raw["available_date"]) >= from_date
        ]
        documents.sort(key=lambda d: d.key.sort_key)
        return documents[:count]

    def add_line(self, document_id: str, line: StockLine) -> StockLine:
        self._mutate(document_id, lambda doc: doc.add_line(line))
        return line

    def remove_line(self, document_id: str, line_id: str) -> None:
        self._mutate(document_id, lambda doc: doc.remove_line(line_id))

    def update_line(
        self,
        document_id: str,
        line_id: str,
        quantity_kg: float | None = None,
        status: LineStatus | None = None,
    ) -> StockLine:
        return self._mutate(
            document_id,
            lambda doc: doc.update_line(line_id, quantity_kg=quantity_kg, status=status),
        )

    def adjust_quantity(
        self,
        document_id: str,
        line_id: str,
        delta: KilogramDelta,
        enforce_sufficiency: bool = True,
    ) -> None:
        self._mutate(
            document_id,
            lambda doc: doc.adjust_line(line_id, delta, enforce_sufficiency),
        )

    def mark_soldout_if_exhausted(self, document_id: str, line_id: str) -> StockLine:
        return self._mutate(
            document_id, lambda doc: doc.mark_soldout_if_exhausted(line_id)
        )

    # --- Locked read-modify-write ---------------------------------------------

    def _mutate(self, document_id: str, change: Callable[[StockDocument], T]) -> T:
        """Apply *change* to one document and persist, all under the file lock.

        If *change* raises, nothing is written.
        """
        with self._file.lock:
            records = self._file.read()
            raw = self._find_raw(records, document_id)
            if raw is None:
                raise EntityNotFoundError(f"Stock document '{document_id}' not found")
            document = self._to_domain(raw)
            result = change(document)
            records[records.index(raw)] = self._to_raw(document)
            self._file.write(records)
        return result

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _find_raw(records: list[dict], document_id: str) -> dict | None:
        for raw in records:
            if raw["id"] == document_id:
                return raw
        return None

    @staticmethod
    def _key_of(raw: dict) -> StockKey:
        return StockKey(
            logistics_center_id=raw["logistics_center_id"],
            available_date=date.fromisoformat(raw["available_date"]),
            shift=ShiftName(raw["shift"]),
        )

    @staticmethod
    def _line_to_raw(line: StockLine) -> dict:
        return {
            "id": line.id,
            "item_id": line.item_id,
            "display_name": line.display_name,
            "image_url": line.image_url,
            "category": line.category,
            "price_per_unit": str(line.price_per_unit.amount),
            "currency": line.price_per_unit.currency,
            "original_committed_quantity_kg": line.original_committed_quantity_kg,
            "current_available_quantity_kg": line.current_available_quantity_kg,
            "farmer_order_id": line.farmer_order_id,
            "farmer_id": line.farmer_id,
            "farmer_name": line.farmer_name,
            "farm_name": line.farm_name,
            "farm_logo": line.farm_logo,
            "status": line.status.value,
        }

    @staticmethod
    def _line_to_domain(raw: dict) -> StockLine:
        return StockLine(
            id=raw["id"],
            item_id=raw["item_id"],
            display_name=raw["display_name"],
            image_url=raw.get("image_url"),
            category=raw["category"],
            price_per_unit=Money(Decimal(raw["price_per_unit"]), raw.get("currency", "USD")),
            original_committed_quantity_kg=raw["original_committed_quantity_kg"],
            current_available_quantity_kg=raw["current_available_quantity_kg"],
            farmer_order_id=raw.get("farmer_order_id"),
            farmer_id=raw["farmer_id"],
            farmer_name=raw["farmer_name"],
            farm_name=raw["farm_name"],
            farm_logo=raw.get("farm_logo"),
            status=LineStatus(raw.get("status", LineStatus.ACTIVE.value)),
        )

    def _to_raw(self, document: StockDocument) -> dict:
        return {
            "id": document.id,
            "logistics_center_id": document.key.logistics_center_id,
            "available_date": document.key.available_date.isoformat(),
            "shift": document.key.shift.value,
            "created_by_id": document.created_by_id,
            "created_at": document.created_at.isoformat(),
            "lines": [self._line_to_raw(line) for line in document.lines],
        }

    def _to_domain(self, raw: dict) -> StockDocument:
        return StockDocument(
            id=raw["id"],
            key=self._key_of(raw),
            created_by_id=raw.get("created_by_id"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            lines=[self._line_to_domain(line) for line in raw.get("lines", [])],
        )
