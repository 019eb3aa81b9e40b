"""
ATM Service - Application service for withdrawals and refills.

Translates transport input into calls against the Atm and serializes every
money-mutating call so that validation and application never interleave.
"""

import asyncio
from decimal import Decimal
from typing import Any

from core.exceptions import InvalidAmountError, InvalidRefillError
from core.value_objects import (
    CENT,
    RefillReceipt,
    WithdrawalPlan,
    format_value,
    is_whole_cents,
    to_decimal,
)
from domain.atm import Atm
from loggers import logger


class AtmService:
    """
    Application service wrapping one Atm.

    Every transport (HTTP, Redis command channel) goes through the same
    instance, which owns the lock guarding the machine's stock.
    """

    def __init__(self, atm: Atm) -> None:
        """
        Initialize the service.

        Args:
            atm: The machine this service operates.
        """
        self._atm = atm
        self._lock = asyncio.Lock()

    @property
    def atm(self) -> Atm:
        """The machine this service operates."""
        return self._atm

    # =========================================================================
    # Input Validation
    # =========================================================================

    def parse_withdrawal_amount(self, raw: Any) -> Decimal:
        """
        Validate a requested withdrawal amount.

        Args:
            raw: Amount as received from the transport.

        Returns:
            The amount as a ``Decimal``.

        Raises:
            InvalidAmountError: Missing, non-numeric, finer than a cent, or
                outside ``0.01 .. maximum_withdrawal``.
        """
        if raw is None:
            raise InvalidAmountError("Missing 'amount' parameter.")

        try:
            amount = to_decimal(raw)
        except ValueError:
            raise InvalidAmountError("'amount' parameter is in the wrong format.") from None

        if not is_whole_cents(amount):
            raise InvalidAmountError("'amount' parameter is in the wrong format.")

        maximum = self._atm.maximum_withdrawal
        if amount < CENT or amount > maximum:
            raise InvalidAmountError(
                f"Amount is not in the range of 0.01 to {format_value(maximum)}.",
                details={"minimum": "0.01", "maximum": format_value(maximum)},
            )

        return amount

    # =========================================================================
    # Operations
    # =========================================================================

    async def withdraw(self, raw_amount: Any) -> WithdrawalPlan:
        """
        Withdraw the requested amount.

        Raises:
            InvalidAmountError: The amount failed validation.
            InsufficientFundsError: Stock cannot cover the amount exactly.
            CoinLimitExceededError: Covering it would need too many coins.
        """
        amount = self.parse_withdrawal_amount(raw_amount)
        logger.info(f"Withdrawal requested: {format_value(amount)}")
        async with self._lock:
            return self._atm.withdraw(amount)

    async def refill(self, money: Any) -> list[RefillReceipt]:
        """
        Validate and apply a refill request.

        Raises:
            InvalidRefillError: The request is missing or has an invalid entry.
        """
        if money is None:
            raise InvalidRefillError(message="Missing 'money' parameter.")
        logger.info(f"Refill requested: {money}")
        async with self._lock:
            return self._atm.refill(money)

    async def list_denomination_values(self) -> list[Decimal]:
        """Denomination values held by the machine, highest first."""
        return self._atm.denomination_values()

    def get_maximum_withdrawal(self) -> Decimal:
        """Largest amount a single withdrawal may request."""
        return self._atm.maximum_withdrawal

    async def inventory_status(self) -> dict[str, Any]:
        """Consistent snapshot of the stock and its total value."""
        async with self._lock:
            return {
                "inventory": self._atm.inventory(),
                "total": format_value(self._atm.total_value()),
                "max_coins_per_withdrawal": self._atm.max_coins_per_withdrawal,
            }
