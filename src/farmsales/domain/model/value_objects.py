"""Money and Quantity.

Both are frozen dataclasses that validate on construction, so an order
line, a payment or a receipt can never hold a negative amount or a zero
quantity. Amounts and quantities are Decimal throughout: produce is sold
by weight, so 2.5 (kg) is as valid as 3. Money is rounded to the cent,
half up, only where a rate or a weight is applied to it.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from farmsales.domain.exceptions import ValidationError

CENT = Decimal("0.01")
DEFAULT_CURRENCY = "LKR"


@functools.total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative amount in a single currency (rupees by default)."""

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Expected a Decimal amount, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Amount must be finite, got {self.amount}")
        if self.amount < 0:
            raise ValidationError(f"Amount cannot be negative, got {self.amount}")

    @classmethod
    def of(cls, amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from user input; anything Decimal can't parse is a ValidationError."""
        try:
            return cls(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(Decimal("0.00"), currency)

    @property
    def is_zero(self) -> bool:
        return not self.amount

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._amount_of(other), self.currency)

    def __sub__(self, other: Money) -> Money:
        remainder = self.amount - self._amount_of(other)
        if remainder < 0:
            raise ValidationError(f"Cannot take {other} from {self}")
        return Money(remainder, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        """Price times a count or a weight, rounded half up to the cent."""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Money can only be multiplied by an int or Decimal, not {type(factor).__name__}"
            )
        return Money((self.amount * factor).quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._amount_of(other)

    def apply_rate(self, rate: Decimal) -> Money:
        """``self * rate``, rounded half up to the cent."""
        return Money((self.amount * rate).quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        return f"Rs {self.amount:.2f}"

    def _amount_of(self, other: Money) -> Decimal:
        if other.currency != self.currency:
            raise ValidationError(f"Currency mismatch: {self.currency} vs {other.currency}")
        return other.amount


@dataclass(frozen=True)
class Quantity:
    """Amount of a product on an order line, in its selling unit (usually kg).

    Ints, Decimals and numeric strings are accepted and stored as Decimal.
    """

    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", as_quantity(self.value))
        if self.value <= 0:
            raise ValidationError(f"Quantity must be greater than 0, got {self.value}")

    def __str__(self) -> str:
        return format_quantity(self.value)


def as_quantity(raw: int | float | str | Decimal, label: str = "Quantity") -> Decimal:
    """Coerce user or stored input to a finite Decimal; the sign is not checked."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str, Decimal)):
        raise ValidationError(f"{label} must be a number, got {type(raw).__name__}")
    try:
        number = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"{label} must be a number, got {raw!r}") from exc
    if not number.is_finite():
        raise ValidationError(f"{label} must be finite, got {raw!r}")
    return number


def format_quantity(value: int | Decimal) -> str:
    """``Decimal("7.50")`` -> ``"7.5"``, ``Decimal("10")`` -> ``"10"``."""
    text = f"{Decimal(value).normalize():f}"
    return "0" if text == "-0" else text
