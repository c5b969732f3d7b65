"""Abstract repository for the StockDocument aggregate.

Stores expose no ``save(document)``. A line's available quantity changes
only through ``adjust_quantity`` or the bounded ``update_line``, which
keep ``0 <= current <= original``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from marketstock.domain.model.stock import LineStatus, StockDocument, StockKey, StockLine
from marketstock.domain.model.value_objects import KilogramDelta


class StockRepository(ABC):

    @abstractmethod
    def get_by_id(self, document_id: str) -> StockDocument | None:
        """Return a stock document by id, or None."""

    @abstractmethod
    def get_by_key(self, key: StockKey) -> StockDocument | None:
        """Return the stock document for a center/date/shift, or None."""

    @abstractmethod
    def find_or_create(
        self, key: StockKey, created_by_id: str | None = None
    ) -> StockDocument:
        """Return the document for *key*, creating an empty one if needed."""

    @abstractmethod
    def list_upcoming(
        self, logistics_center_id: str, from_date: date, count: int
    ) -> list[StockDocument]:
        """Documents of a center dated on/after *from_date*, by date then shift."""

    @abstractmethod
    def add_line(self, document_id: str, line: StockLine) -> StockLine:
        """Append a line to a document.

        Raises EntityNotFoundError if the document does not exist.
        """

    @abstractmethod
    def remove_line(self, document_id: str, line_id: str) -> None:
        """Remove a line. Raises EntityNotFoundError if either id is unknown."""

    @abstractmethod
    def update_line(
        self,
        document_id: str,
        line_id: str,
        quantity_kg: float | None = None,
        status: LineStatus | None = None,
    ) -> StockLine:
        """Set a line's quantity (within ``[0, original]``) and/or status."""

    @abstractmethod
    def adjust_quantity(
        self,
        document_id: str,
        line_id: str,
        delta: KilogramDelta,
        enforce_sufficiency: bool = True,
    ) -> None:
        """Atomically add *delta* to a line's available quantity.

        The new value is clamped to ``[0, original]``. When reserving with
        *enforce_sufficiency*, the sufficiency check and the write happen
        in the same atomic step.

        Raises EntityNotFoundError if the document or line does not exist,
        InsufficientStockError if the reservation cannot be covered.
        """

    @abstractmethod
    def mark_soldout_if_exhausted(self, document_id: str, line_id: str) -> StockLine:
        """Set a line's status to ``soldout`` if its available quantity is zero.

        The zero check and the status write are one atomic step, so a
        release landing in between cannot leave stock behind a ``soldout``
        line. Returns the line as it is after the step.
        """
