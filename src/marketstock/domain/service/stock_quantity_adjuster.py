"""Domain service: Stock Quantity Adjuster.

Reserves (negative delta) or releases (positive delta) kilograms on one
stock line. The delta is validated here, before any store access; the
sufficiency check, the clamp and the write are then a single atomic
operation of the repository.

No retries happen at this level. A refused reservation is an ordinary
outcome that the caller turns into "out of stock".
"""

from __future__ import annotations

import logging

from marketstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from marketstock.domain.model.value_objects import KilogramDelta
from marketstock.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class StockQuantityAdjuster:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def adjust(
        self,
        document_id: str,
        line_id: str,
        delta_kg: float,
        enforce_sufficiency: bool = True,
    ) -> None:
        """Apply *delta_kg* to the line's available quantity.

        Raises:
            ValidationError: *delta_kg* is zero, non-numeric or non-finite.
            EntityNotFoundError: document or line does not exist.
            InsufficientStockError: reservation exceeds what is available
                (only when *enforce_sufficiency* is true).
        """
        delta = KilogramDelta(delta_kg)

        try:
            self._stock_repo.adjust_quantity(
                document_id, line_id, delta, enforce_sufficiency=enforce_sufficiency
            )
        except InsufficientStockError as exc:
            logger.info(
                "Reservation refused on %s/%s: requested=%g available=%g",
                document_id, line_id, exc.requested, exc.available,
            )
            raise
        except EntityNotFoundError:
            logger.warning("Adjustment target not found: %s/%s", document_id, line_id)
            raise

        logger.debug(
            "%s %s on %s/%s",
            "Reserved" if delta.is_reservation else "Released",
            delta, document_id, line_id,
        )

    def reserve(self, document_id: str, line_id: str, kg: float) -> None:
        """Reserve *kg* with sufficiency enforced."""
        self.adjust(document_id, line_id, -_positive(kg), enforce_sufficiency=True)

    def release(self, document_id: str, line_id: str, kg: float) -> None:
        """Return *kg* to the pool (clamped at the committed quantity)."""
        self.adjust(document_id, line_id, _positive(kg))


def _positive(kg: float) -> float:
    # Sign is implied by reserve/release; reject a pre-negated amount.
    delta = KilogramDelta(kg)
    if delta.is_reservation:
        raise ValidationError("Quantity must be positive")
    return delta.value
