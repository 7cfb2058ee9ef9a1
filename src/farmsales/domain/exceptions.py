"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each subclass carries a stable ``code`` so callers can tell *which* rule
rejected the request without parsing the message.
"""

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "domain_error"


class ValidationError(DomainException):
    """A business rule or invariant was violated, or required input is missing."""

    code = "validation_failed"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "not_found"


class ForbiddenError(DomainException):
    """The acting role may not request this transition from the current state."""

    code = "forbidden"


class InvalidTransitionError(DomainException):
    """The target is unreachable from the current state, whatever the role."""

    code = "invalid_transition"


class InsufficientStockError(ValidationError):
    """A ledger reservation or sale exceeds the available quantity."""

    code = "insufficient_stock"

    def __init__(self, product_name: str, requested: Decimal, available: Decimal) -> None:
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(need {_plain(requested)}, have {_plain(available)} available)"
        )


class InvalidAmountError(ValidationError):
    """A collected payment amount is outside the permitted bounds."""

    code = "invalid_amount"


class InvalidReturnError(ValidationError):
    """A product return request breaks the return rules."""

    code = "invalid_return"


def _plain(number: int | Decimal) -> str:
    return f"{Decimal(number).normalize():f}"
