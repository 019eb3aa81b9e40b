"""
Allocator - Greedy denomination breakdown for one currency class.

Takes as many units of the highest denomination as stock and the remaining
amount allow before moving to the next one down. There is no backtracking:
when the greedy pass leaves a residual, that residual is reported even if
some other combination of units could have covered the amount.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Union

from core.value_objects import Allocation, CurrencyClass, to_cents
from domain.denomination import Denomination


def allocate(
    amount: Union[Decimal, int, str],
    denominations: Iterable[Denomination],
    currency_class: CurrencyClass,
) -> Allocation:
    """
    Compute the greedy breakdown of ``amount`` over one currency class.

    Reads stock counts but never mutates them.

    Args:
        amount: Non-negative amount to cover; floored to the cent.
        denominations: Candidate denominations, any order.
        currency_class: Only denominations of this class are used.

    Returns:
        Allocation with one plan entry per denomination of the class and
        the uncovered remainder.
    """
    return allocate_cents(to_cents(amount), denominations, currency_class)


def allocate_cents(
    amount_cents: int,
    denominations: Iterable[Denomination],
    currency_class: CurrencyClass,
) -> Allocation:
    """Same as :func:`allocate` with the amount already in cents."""
    if amount_cents < 0:
        raise ValueError(f"Amount to allocate cannot be negative: {amount_cents}")

    remaining = amount_cents
    plan: dict[Decimal, int] = {}

    eligible = sorted(
        (d for d in denominations if d.currency_class == currency_class),
        key=lambda d: d.cents,
        reverse=True,
    )
    for denomination in eligible:
        take = min(remaining // denomination.cents, denomination.count)
        remaining -= take * denomination.cents
        plan[denomination.value] = take

    return Allocation(plan=plan, remaining_cents=remaining)
