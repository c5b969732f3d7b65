"""StockDocument aggregate: what one logistics center can sell in one shift.

A StockDocument is keyed by (logistics center, date, shift) and owns an
ordered list of StockLines, one per farmer offering. Lines are never
addressed on their own; every change goes through the owning document
using the (document id, line id) pair.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from marketstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from marketstock.domain.model.value_objects import KilogramDelta, Money


class ShiftName(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @property
    def rank(self) -> int:
        return _SHIFT_RANK[self]

    @staticmethod
    def parse(value: str | ShiftName) -> ShiftName:
        if isinstance(value, ShiftName):
            return value
        try:
            return ShiftName(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in ShiftName)
            raise ValidationError(
                f"Unknown shift '{value}' (expected one of: {allowed})"
            ) from None


_SHIFT_RANK = {shift: i for i, shift in enumerate(ShiftName)}


class LineStatus(Enum):
    ACTIVE = "active"
    SOLDOUT = "soldout"
    REMOVED = "removed"

    @staticmethod
    def parse(value: str | LineStatus) -> LineStatus:
        if isinstance(value, LineStatus):
            return value
        try:
            return LineStatus(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in LineStatus)
            raise ValidationError(
                f"Unknown line status '{value}' (expected one of: {allowed})"
            ) from None


def normalize_date(value: date | datetime | str) -> date:
    """Reduce a date, datetime or ISO string to a calendar date (UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}") from None
    return normalize_date(parsed)


def clamp_quantity(current: float, delta: float, original: float) -> float:
    """Apply *delta* to *current*, bounded to ``[0, original]``."""
    return max(0.0, min(original, current + delta))


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class StockKey:
    """Identifies a stock document: one per center, date and shift."""

    logistics_center_id: str
    available_date: date
    shift: ShiftName

    @staticmethod
    def of(
        logistics_center_id: str,
        available_date: date | datetime | str,
        shift: str | ShiftName,
    ) -> StockKey:
        if not logistics_center_id or not str(logistics_center_id).strip():
            raise ValidationError("Logistics center id is required")
        return StockKey(
            logistics_center_id=str(logistics_center_id).strip(),
            available_date=normalize_date(available_date),
            shift=ShiftName.parse(shift),
        )

    @property
    def sort_key(self) -> tuple[date, int]:
        return (self.available_date, self.shift.rank)

    def __str__(self) -> str:
        return (
            f"{self.logistics_center_id}/"
            f"{self.available_date.isoformat()}/{self.shift.value}"
        )


@dataclass
class StockLine:
    """One farmer's item offering within a stock document.

    Invariant: ``0 <= current_available_quantity_kg <= original_committed_quantity_kg``.

    Use ``StockLine.create()`` for new lines; the constructor is kept
    plain so repositories can reconstitute persisted lines.
    """

    id: str
    item_id: str
    display_name: str
    category: str
    price_per_unit: Money
    original_committed_quantity_kg: float
    current_available_quantity_kg: float
    farmer_id: str
    farmer_name: str
    farm_name: str
    image_url: str | None = None
    farmer_order_id: str | None = None
    farm_logo: str | None = None
    status: LineStatus = LineStatus.ACTIVE

    @classmethod
    def create(
        cls,
        item_id: str,
        display_name: str,
        category: str,
        price_per_unit: Money,
        original_committed_quantity_kg: float,
        farmer_id: str,
        farmer_name: str,
        farm_name: str,
        current_available_quantity_kg: float | None = None,
        image_url: str | None = None,
        farmer_order_id: str | None = None,
        farm_logo: str | None = None,
        status: LineStatus | str = LineStatus.ACTIVE,
    ) -> StockLine:
        for label, value in (
            ("item_id", item_id),
            ("display_name", display_name),
            ("category", category),
            ("farmer_id", farmer_id),
            ("farmer_name", farmer_name),
            ("farm_name", farm_name),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"Line {label} is required")

        original = as_kg(original_committed_quantity_kg, "originalCommittedQuantityKg")
        current = (
            original
            if current_available_quantity_kg is None
            else as_kg(current_available_quantity_kg, "currentAvailableQuantityKg")
        )
        if current > original:
            raise ValidationError(
                "currentAvailableQuantityKg cannot exceed originalCommittedQuantityKg"
            )

        return cls(
            id=new_id(),
            item_id=str(item_id),
            display_name=display_name.strip(),
            category=category.strip(),
            price_per_unit=price_per_unit,
            original_committed_quantity_kg=original,
            current_available_quantity_kg=current,
            farmer_id=str(farmer_id),
            farmer_name=farmer_name.strip(),
            farm_name=farm_name.strip(),
            image_url=image_url,
            farmer_order_id=farmer_order_id,
            farm_logo=farm_logo,
            status=LineStatus.parse(status),
        )

    def set_quantity(self, quantity_kg: float) -> None:
        """Manually set the available quantity within ``[0, original]``."""
        qty = as_kg(quantity_kg, "Quantity")
        if qty > self.original_committed_quantity_kg:
            raise ValidationError("Exceeds original committed quantity")
        self.current_available_quantity_kg = qty


@dataclass
class StockDocument:
    """Aggregate root for the stock of one center, date and shift."""

    id: str
    key: StockKey
    created_by_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lines: list[StockLine] = field(default_factory=list)

    @classmethod
    def create(cls, key: StockKey, created_by_id: str | None = None) -> StockDocument:
        return cls(id=new_id(), key=key, created_by_id=created_by_id)

    @property
    def has_lines(self) -> bool:
        return bool(self.lines)

    def find_line(self, line_id: str) -> StockLine | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def get_line(self, line_id: str) -> StockLine:
        line = self.find_line(line_id)
        if line is None:
            raise EntityNotFoundError(
                f"Line '{line_id}' not found in stock document '{self.id}'"
            )
        return line

    def add_line(self, line: StockLine) -> None:
        if self.find_line(line.id) is not None:
            raise ValidationError(f"Line '{line.id}' already exists in '{self.id}'")
        self.lines.append(line)

    def remove_line(self, line_id: str) -> StockLine:
        line = self.get_line(line_id)
        self.lines.remove(line)
        return line

    def update_line(
        self,
        line_id: str,
        quantity_kg: float | None = None,
        status: LineStatus | None = None,
    ) -> StockLine:
        line = self.get_line(line_id)
        if quantity_kg is not None:
            line.set_quantity(quantity_kg)
        if status is not None:
            line.status = status
        return line

    def adjust_line(
        self,
        line_id: str,
        delta: KilogramDelta,
        enforce_sufficiency: bool = True,
    ) -> StockLine:
        """Apply a signed delta to one line, clamped to ``[0, original]``.

        Stores that keep documents in memory call this while holding the
        document's lock; the check and the write must not be separated.
        """
        line = self.get_line(line_id)
        available = line.current_available_quantity_kg
        if delta.is_reservation and enforce_sufficiency and available < delta.magnitude:
            raise InsufficientStockError(
                f"Not enough available quantity to reserve "
                f"(need {delta.magnitude:g} kg, have {available:g} kg)",
                requested=delta.magnitude,
                available=available,
            )
        line.current_available_quantity_kg = clamp_quantity(
            available, delta.value, line.original_committed_quantity_kg
        )
        return line

    def mark_soldout_if_exhausted(self, line_id: str) -> StockLine:
        """Mark a line ``soldout`` only if nothing is left on it right now."""
        line = self.get_line(line_id)
        if line.current_available_quantity_kg == 0 and line.status is not LineStatus.SOLDOUT:
            line.status = LineStatus.SOLDOUT
        return line


def as_kg(value: float, label: str = "Quantity") -> float:
    """Validate a non-negative, finite kilogram amount."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number")
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return float(value)
