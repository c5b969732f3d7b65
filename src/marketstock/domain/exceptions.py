"""Domain-level exceptions.

Every error raised by the domain and application layers derives from
DomainException; the CLI turns any of them into a one-line message.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """A reservation asked for more than the line has available.

    This is an expected outcome, not a fault: callers show it as
    "out of stock" and may retry with a smaller quantity.
    """

    def __init__(self, message: str, requested: float, available: float) -> None:
        super().__init__(message)
        self.requested = requested
        self.available = available
