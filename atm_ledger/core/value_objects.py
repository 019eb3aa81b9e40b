"""
Value Objects for the ATM ledger.

Immutable objects that represent values in the domain.
Amounts are carried as integer cents internally to avoid floating-point
drift; denomination values are exposed as canonical ``Decimal`` instances.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from enum import Enum
from typing import Any


CENTS_PER_UNIT = 100
CENT = Decimal("0.01")
# Amounts at or above 10**MAX_AMOUNT_DIGITS are refused before any arithmetic
MAX_AMOUNT_DIGITS = 15


# =============================================================================
# Enums
# =============================================================================


class CurrencyClass(str, Enum):
    """Physical class of a denomination."""

    BILL = "bill"
    COIN = "coin"


# =============================================================================
# Cents Conversion
# =============================================================================


def to_decimal(value: Any) -> Decimal:
    """
    Parse a number or numeric string into a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return result


def to_cents(value: Any) -> int:
    """
    Convert an amount to whole cents, flooring anything below a cent.

    Raises:
        ValueError: If the value is not a finite number or has more than
            ``MAX_AMOUNT_DIGITS`` integer digits.
    """
    amount = to_decimal(value)
    if amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise ValueError(f"Amount out of range: {value!r}")
    floored = amount.quantize(CENT, rounding=ROUND_FLOOR)
    return int(floored * CENTS_PER_UNIT)


def is_whole_cents(amount: Decimal) -> bool:
    """True when ``amount`` has no significant digit below the cent."""
    _, digits, exponent = amount.as_tuple()
    extra = -exponent - 2
    return extra <= 0 or not any(digits[-extra:])


def from_cents(cents: int) -> Decimal:
    """Convert whole cents back to a canonical decimal amount (``200``, ``0.1``)."""
    return Decimal(cents) / CENTS_PER_UNIT


def format_value(value: Decimal) -> str:
    """Render a denomination value without exponent notation."""
    return format(value, "f")


# =============================================================================
# Allocation Value Objects
# =============================================================================


@dataclass(frozen=True)
class Allocation:
    """
    Result of one greedy pass over a single currency class.

    Attributes:
        plan: Denomination value -> units to release, one key per
            denomination of the class (zero counts included).
        remaining_cents: Part of the amount the pass could not cover.
    """

    plan: dict[Decimal, int] = field(default_factory=dict)
    remaining_cents: int = 0

    @property
    def remaining(self) -> Decimal:
        """Uncovered amount, quantized to the cent."""
        return from_cents(self.remaining_cents).quantize(CENT)

    @property
    def unit_count(self) -> int:
        """Total number of bills or coins in the plan."""
        return sum(self.plan.values())


@dataclass(frozen=True)
class WithdrawalPlan:
    """
    Breakdown of one withdrawal, partitioned by currency class.

    Attributes:
        bills: Bill value -> count dispensed.
        coins: Coin value -> count dispensed.
    """

    bills: dict[Decimal, int] = field(default_factory=dict)
    coins: dict[Decimal, int] = field(default_factory=dict)

    @property
    def bill_count(self) -> int:
        """Number of bills in the plan."""
        return sum(self.bills.values())

    @property
    def coin_count(self) -> int:
        """Number of coins in the plan."""
        return sum(self.coins.values())

    @property
    def combined(self) -> dict[Decimal, int]:
        """Bills and coins merged into one value -> count mapping."""
        return {**self.bills, **self.coins}

    @property
    def total(self) -> Decimal:
        """Face value of everything in the plan."""
        cents = sum(to_cents(value) * count for value, count in self.combined.items())
        return from_cents(cents).quantize(CENT)

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Convert to a JSON-friendly dictionary keyed by value strings."""
        return {
            "bills": {format_value(value): count for value, count in self.bills.items()},
            "coins": {format_value(value): count for value, count in self.coins.items()},
        }


# =============================================================================
# Refill Value Objects
# =============================================================================


@dataclass(frozen=True)
class RefillReceipt:
    """
    Record of one denomination topped up by a refill.

    Attributes:
        value: Denomination value that was refilled.
        currency_class: Class of the refilled denomination.
        count: Units added.
    """

    value: Decimal
    currency_class: CurrencyClass
    count: int

    @property
    def message(self) -> str:
        """Human-readable confirmation."""
        return (
            f"Successfully added {self.count} {format_value(self.value)}-unit "
            f"{self.currency_class.value}s"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "denomination": format_value(self.value),
            "class": self.currency_class.value,
            "count": self.count,
            "message": self.message,
        }
