"""
Money Value Object

Immutable amount + currency pair with 2-digit fixed-point precision.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Union

from subtrack.infrastructure.exceptions import (
    CurrencyMismatchError,
    InvalidCurrencyError,
    InvalidMoneyError,
)


class Currency(str, Enum):
    """Supported subscription currencies."""
    BRL = "BRL"
    USD = "USD"

    @classmethod
    def parse(cls, value: Union["Currency", str]) -> "Currency":
        """Parse an ISO currency code (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidCurrencyError(value)


_CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    try:
        # str() first so floats like 29.9 do not carry binary noise
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidMoneyError(f"Invalid money amount: {value!r}", original_error=e)
    if not amount.is_finite():
        raise InvalidMoneyError(f"Invalid money amount: {value!r}")
    return amount


@dataclass(frozen=True)
class Money:
    """
    Monetary value in a single currency.

    Amounts are rounded to cents on construction. Arithmetic between two
    Money values requires the same currency.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        amount = _to_decimal(self.amount)
        if amount < 0:
            raise InvalidMoneyError(
                "Money amount cannot be negative",
                details={"amount": str(amount)},
            )
        object.__setattr__(self, "amount", amount.quantize(_CENTS, rounding=ROUND_HALF_UP))
        object.__setattr__(self, "currency", Currency.parse(self.currency))

    def add(self, other: "Money") -> "Money":
        self._ensure_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def multiply(self, multiplier: Number) -> "Money":
        factor = _to_decimal(multiplier)
        if factor < 0:
            raise InvalidMoneyError("Multiplier cannot be negative")
        return Money(self.amount * factor, self.currency)

    def _ensure_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.value, other.currency.value)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"
