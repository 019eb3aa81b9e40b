"""
Denomination - One currency unit held by the machine and its stock.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Union

from core.value_objects import CurrencyClass, from_cents, format_value, to_cents


class Denomination:
    """
    A currency unit value, its physical class and the units in stock.

    The value is stored as integer cents; ``value`` exposes the canonical
    ``Decimal`` form used as the plan key.
    """

    def __init__(
        self,
        value: Union[Decimal, int, float, str],
        currency_class: CurrencyClass,
        count: int = 0,
    ) -> None:
        """
        Initialize the denomination.

        Args:
            value: Face value of one unit.
            currency_class: Whether this is a bill or a coin.
            count: Initial number of units in stock.

        Raises:
            ValueError: If the value is not positive or the count is negative.
        """
        cents = to_cents(value)
        if cents <= 0:
            raise ValueError(f"Denomination value must be positive: {value!r}")
        if count < 0:
            raise ValueError(f"Denomination count cannot be negative: {count!r}")

        self._cents = cents
        self._currency_class = CurrencyClass(currency_class)
        self._count = int(count)

    @property
    def cents(self) -> int:
        """Face value in cents."""
        return self._cents

    @property
    def value(self) -> Decimal:
        """Face value of one unit."""
        return from_cents(self._cents)

    @property
    def name(self) -> str:
        """Value rendered as a string key (``"200"``, ``"0.01"``)."""
        return format_value(self.value)

    @property
    def currency_class(self) -> CurrencyClass:
        """Bill or coin."""
        return self._currency_class

    @property
    def count(self) -> int:
        """Units currently in stock."""
        return self._count

    def add(self, units: Union[int, str]) -> None:
        """
        Add units to stock.

        Args:
            units: Positive integer, or a string holding one.

        Raises:
            ValueError: If ``units`` is not a positive integer.
        """
        coerced = _coerce_units(units)
        if coerced <= 0:
            raise ValueError(f"Units to add must be positive: {units!r}")
        self._count += coerced

    def dispense(self, units: Optional[int]) -> None:
        """
        Remove units from stock.

        ``None`` means the denomination is not part of the applied plan and
        leaves the count untouched. Feasibility is checked by the caller.
        """
        if units is None:
            return
        self._count -= _coerce_units(units)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "value": self.name,
            "class": self._currency_class.value,
            "count": self._count,
        }

    def __repr__(self) -> str:
        return (
            f"Denomination(value={self.name}, "
            f"class={self._currency_class.value}, count={self._count})"
        )


def _coerce_units(units: Union[int, str]) -> int:
    """Coerce a unit count, rejecting anything that is not a whole number."""
    if isinstance(units, bool):
        raise ValueError(f"Not a unit count: {units!r}")
    if isinstance(units, int):
        return units
    try:
        return int(str(units).strip())
    except ValueError:
        raise ValueError(f"Not a unit count: {units!r}") from None
