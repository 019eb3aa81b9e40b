"""
Atm - Inventory manager for the machine's denominations.

Owns the ordered denomination set and orchestrates withdrawals (bills pass,
coins pass, validation, then application) and refills (validation, then
per-denomination increments). Every check runs before any count changes.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from core.exceptions import (
    CoinLimitExceededError,
    DenominationNotFoundError,
    InsufficientFundsError,
    InvalidRefillError,
)
from core.value_objects import (
    CENT,
    MAX_AMOUNT_DIGITS,
    CurrencyClass,
    RefillReceipt,
    WithdrawalPlan,
    format_value,
    from_cents,
    to_cents,
    to_decimal,
)
from domain.allocator import allocate_cents
from domain.denomination import Denomination
from loggers import logger


Number = Union[Decimal, int, float, str]


class Atm:
    """
    Ledger of one cash machine.

    Attributes:
        maximum_withdrawal: Largest amount a single withdrawal may request.
        max_coins_per_withdrawal: Ceiling on coins released by one withdrawal.
    """

    def __init__(
        self,
        denominations: Iterable[Denomination],
        maximum_withdrawal: Number,
        max_coins_per_withdrawal: int,
    ) -> None:
        """
        Initialize the machine.

        Args:
            denominations: Denominations held by the machine, any order.
            maximum_withdrawal: Largest amount a single withdrawal may request.
            max_coins_per_withdrawal: Ceiling on coins per withdrawal.

        Raises:
            ValueError: If two denominations share a value.
        """
        inventory = sorted(denominations, key=lambda d: d.cents, reverse=True)

        by_cents: dict[int, Denomination] = {}
        for denomination in inventory:
            if denomination.cents in by_cents:
                raise ValueError(f"Duplicate denomination value: {denomination.name}")
            by_cents[denomination.cents] = denomination

        self._inventory: list[Denomination] = inventory
        self._by_cents = by_cents
        self._maximum_withdrawal = to_decimal(maximum_withdrawal)
        self._max_coins_per_withdrawal = max_coins_per_withdrawal

    @classmethod
    def from_seed(
        cls,
        seed: Iterable[Any],
        maximum_withdrawal: Number,
        max_coins_per_withdrawal: int,
    ) -> "Atm":
        """
        Build a machine from seed rows.

        Args:
            seed: Objects with ``value``, ``currency_class`` and ``count``.
            maximum_withdrawal: Largest amount a single withdrawal may request.
            max_coins_per_withdrawal: Ceiling on coins per withdrawal.
        """
        denominations = [
            Denomination(row.value, CurrencyClass(row.currency_class), row.count)
            for row in seed
        ]
        return cls(denominations, maximum_withdrawal, max_coins_per_withdrawal)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def maximum_withdrawal(self) -> Decimal:
        """Largest amount a single withdrawal may request."""
        return self._maximum_withdrawal

    @property
    def max_coins_per_withdrawal(self) -> int:
        """Ceiling on coins released by one withdrawal."""
        return self._max_coins_per_withdrawal

    def denomination_values(self) -> list[Decimal]:
        """Values held by the machine, highest first."""
        return [denomination.value for denomination in self._inventory]

    def counts(self) -> dict[Decimal, int]:
        """Snapshot of value -> units in stock."""
        return {denomination.value: denomination.count for denomination in self._inventory}

    def inventory(self) -> list[dict[str, Any]]:
        """Snapshot of every denomination, highest value first."""
        return [denomination.to_dict() for denomination in self._inventory]

    def total_value(self) -> Decimal:
        """Face value of everything in stock."""
        cents = sum(d.cents * d.count for d in self._inventory)
        return from_cents(cents).quantize(CENT)

    def find(self, value: Number) -> Optional[Denomination]:
        """
        Look up a denomination by value.

        Returns:
            The matching denomination, or None if the value is not held or
            is not a number.
        """
        try:
            requested = to_decimal(value)
            cents = to_cents(requested)
        except ValueError:
            return None
        denomination = self._by_cents.get(cents)
        if denomination is None or denomination.value != requested:
            return None
        return denomination

    # =========================================================================
    # Withdrawal
    # =========================================================================

    def withdraw(self, amount: Number) -> WithdrawalPlan:
        """
        Dispense ``amount``, bills first and coins for the rest.

        Args:
            amount: Amount to withdraw; range and precision are checked by
                the caller.

        Returns:
            The applied plan.

        Raises:
            InsufficientFundsError: Stock cannot cover the amount exactly.
            CoinLimitExceededError: Covering it would need too many coins.
        """
        amount_cents = to_cents(amount)

        bills = allocate_cents(amount_cents, self._inventory, CurrencyClass.BILL)
        coins = allocate_cents(bills.remaining_cents, self._inventory, CurrencyClass.COIN)
        plan = WithdrawalPlan(bills=bills.plan, coins=coins.plan)

        if coins.remaining_cents > 0:
            logger.warning(
                f"Withdrawal of {format_value(from_cents(amount_cents))} refused: "
                f"{format_value(coins.remaining)} left uncovered"
            )
            raise InsufficientFundsError(plan, coins.remaining)

        if coins.unit_count > self._max_coins_per_withdrawal:
            logger.warning(
                f"Withdrawal of {format_value(from_cents(amount_cents))} refused: "
                f"needs {coins.unit_count} coins, limit {self._max_coins_per_withdrawal}"
            )
            raise CoinLimitExceededError(coins.unit_count, self._max_coins_per_withdrawal)

        self._apply(plan)
        logger.info(
            f"Dispensed {format_value(plan.total)}: "
            f"{plan.bill_count} bills, {plan.coin_count} coins"
        )
        return plan

    def _apply(self, plan: WithdrawalPlan) -> None:
        """Decrement stock per a validated plan."""
        dispensed = plan.combined
        for denomination in self._inventory:
            denomination.dispense(dispensed.get(denomination.value))

    # =========================================================================
    # Refill
    # =========================================================================

    def validate_refill(self, request: Any) -> bool:
        """
        Check every entry of a refill request before anything is applied.

        An entry is valid when its key is exactly one of this machine's
        denomination values and its amount is a strictly positive integer
        (or a string holding one).

        Raises:
            InvalidRefillError: If the request is empty, not a mapping, or
                any entry is invalid. ``details["invalid"]`` lists the keys.
        """
        if not isinstance(request, Mapping) or not request:
            raise InvalidRefillError()

        invalid = [
            str(key)
            for key, units in request.items()
            if self.find(key) is None or _parse_refill_units(units) is None
        ]
        if invalid:
            logger.warning(f"Rejected refill request, invalid entries: {invalid}")
            raise InvalidRefillError(invalid)

        return True

    def refill_denomination(self, value: Number, units: Union[int, str]) -> CurrencyClass:
        """
        Add stock to a single denomination.

        Args:
            value: Denomination value.
            units: Positive integer, or a string holding one.

        Returns:
            Class of the refilled denomination.

        Raises:
            DenominationNotFoundError: The machine holds no such value.
            InvalidRefillError: ``units`` is not a positive integer.
        """
        denomination = self.find(value)
        if denomination is None:
            logger.warning(f"Refill for unknown denomination {value}")
            raise DenominationNotFoundError(value)

        coerced = _parse_refill_units(units)
        if coerced is None:
            raise InvalidRefillError([str(value)])

        denomination.add(coerced)
        logger.info(f"Added {coerced} x {denomination.name}, now {denomination.count}")
        return denomination.currency_class

    def refill(self, request: Mapping[Any, Any]) -> list[RefillReceipt]:
        """
        Validate a refill request, then apply it entry by entry.

        Returns:
            One receipt per entry, in request order.

        Raises:
            InvalidRefillError: Validation failed; nothing was applied.
        """
        self.validate_refill(request)

        receipts = []
        for value, units in request.items():
            currency_class = self.refill_denomination(value, units)
            denomination = self.find(value)
            receipts.append(
                RefillReceipt(
                    value=denomination.value,
                    currency_class=currency_class,
                    count=_parse_refill_units(units),
                )
            )
        return receipts


def _parse_refill_units(units: Any) -> Optional[int]:
    """
    Coerce a refill amount to an integer.

    Returns:
        The integer when ``units`` is a whole, strictly positive number
        with fewer than ``MAX_AMOUNT_DIGITS`` digits, otherwise None.
    """
    try:
        parsed = to_decimal(units)
    except ValueError:
        return None
    if parsed.adjusted() >= MAX_AMOUNT_DIGITS:
        return None
    if parsed != parsed.to_integral_value() or parsed <= 0:
        return None
    return int(parsed)
