"""Data Transfer Objects passed between the CLI and application layers.

Output DTOs hold display-ready values; the domain objects they are
built from never leave the application layer.
"""

from __future__ import annotations

from dataclasses import dataclass

from marketstock.domain.model.stock import StockDocument, StockLine


@dataclass(frozen=True)
class NewLineSpec:
    """Input: a farmer's approved offering to publish on a stock document."""

    item_id: str
    farmer_id: str
    farmer_name: str
    farm_name: str
    original_committed_quantity_kg: float
    current_available_quantity_kg: float | None = None
    price_per_unit: str | None = None  # derived from the catalog when omitted
    display_name: str | None = None
    category: str | None = None
    image_url: str | None = None
    farmer_order_id: str | None = None
    farm_logo: str | None = None
    status: str = "active"


@dataclass(frozen=True)
class StockLineDTO:
    """Output: a single stock line as displayed to the user."""

    id: str
    item_id: str
    display_name: str
    category: str
    price_per_unit: str  # formatted, e.g. "$3.60"
    original_kg: float
    available_kg: float
    farmer_name: str
    farm_name: str
    status: str

    @staticmethod
    def from_domain(line: StockLine) -> StockLineDTO:
        return StockLineDTO(
            id=line.id,
            item_id=line.item_id,
            display_name=line.display_name,
            category=line.category,
            price_per_unit=str(line.price_per_unit),
            original_kg=line.original_committed_quantity_kg,
            available_kg=line.current_available_quantity_kg,
            farmer_name=line.farmer_name,
            farm_name=line.farm_name,
            status=line.status.value,
        )


@dataclass(frozen=True)
class StockDocumentDTO:
    """Output: a complete stock document."""

    id: str
    logistics_center_id: str
    date: str
    shift: str
    created_at: str
    lines: list[StockLineDTO]

    @staticmethod
    def from_domain(document: StockDocument) -> StockDocumentDTO:
        return StockDocumentDTO(
            id=document.id,
            logistics_center_id=document.key.logistics_center_id,
            date=document.key.available_date.isoformat(),
            shift=document.key.shift.value,
            created_at=document.created_at.isoformat(),
            lines=[StockLineDTO.from_domain(line) for line in document.lines],
        )


@dataclass(frozen=True)
class ShiftStockDTO:
    """Output: a shift slot that has stock to sell."""

    date: str
    shift: str
    document_id: str


@dataclass(frozen=True)
class AdjustmentDTO:
    """Output: a line's state right after a reservation or release."""

    document_id: str
    line_id: str
    new_quantity_kg: float
    status: str
