"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class DataIntegrityError(DomainException):
    """Catalog data is inconsistent (e.g. a missing price column)."""


class DiscountLookupError(DomainException):
    """Discount rules could not be consulted.

    Distinct from "no rule matches": a lookup failure must never be
    priced as if the client had no discount.
    """


class PersistenceError(DomainException):
    """The order store rejected or failed to store an order."""


class NotificationError(DomainException):
    """The order was stored but its document or e-mail could not be sent."""

    def __init__(self, message: str, order_id: str | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class SubmissionInProgressError(DomainException):
    """An order submission is already running for this session."""
