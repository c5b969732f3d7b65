"""Immutable value types for prices and kilogram adjustments.

Both validate on construction, so an instance is always usable as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from marketstock.domain.exceptions import ValidationError

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal so per-kilogram prices survive repeated markup and
    persistence round trips without drifting.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(
                f"Money amount must be finite, got {self.amount}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    def marked_up(self, rate: Decimal) -> Money:
        """Return this amount multiplied by *rate*, rounded to cents."""
        if rate <= 0:
            raise ValidationError(f"Markup rate must be positive, got {rate}")
        scaled = (self.amount * rate).quantize(_CENT, rounding=ROUND_HALF_UP)
        return Money(scaled, self.currency)

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class KilogramDelta:
    """A signed change to a line's available kilograms.

    Negative values reserve stock, positive values release it.
    Zero, NaN and infinity are rejected so they never reach a store.
    """

    value: float

    def __post_init__(self) -> None:
        # bool is an int subclass; True/False are never meaningful here
        if isinstance(self.value, bool) or not isinstance(
            self.value, (int, float, Decimal)
        ):
            raise ValidationError(
                f"deltaKg must be a number, got {type(self.value).__name__}"
            )
        if isinstance(self.value, Decimal) and not self.value.is_finite():
            raise ValidationError("deltaKg must be a finite number")
        if not math.isfinite(self.value):
            raise ValidationError("deltaKg must be a finite number")
        if self.value == 0:
            raise ValidationError("deltaKg must be non-zero")
        object.__setattr__(self, "value", float(self.value))

    @property
    def is_reservation(self) -> bool:
        return self.value < 0

    @property
    def magnitude(self) -> float:
        return abs(self.value)

    def __str__(self) -> str:
        return f"{self.value:+g} kg"
