"""
Custom exceptions for the ATM ledger.

Provides a hierarchy of typed exceptions carrying structured details,
leaving message formatting for responses to the transport layers.
"""

from decimal import Decimal
from typing import Any, Optional

from .value_objects import WithdrawalPlan, format_value


class AtmError(Exception):
    """Base exception for all ATM ledger errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Optional error code for programmatic handling.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Withdrawal Errors
# =============================================================================


class WithdrawalError(AtmError):
    """Base exception for withdrawals the machine cannot fulfil."""

    pass


class InsufficientFundsError(WithdrawalError):
    """The requested amount cannot be covered exactly by current stock."""

    def __init__(
        self,
        plan: WithdrawalPlan,
        remaining: Decimal,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message or "There is not enough money to complete this withdrawal.",
            **kwargs,
        )
        self.plan = plan
        self.remaining = remaining
        self.details["attempted"] = plan.to_dict()
        self.details["remaining"] = format_value(remaining)


class CoinLimitExceededError(WithdrawalError):
    """Covering the amount would take more coins than one dispense allows."""

    def __init__(
        self,
        required_coins: int,
        limit: int,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message
            or f"This ATM cannot dispense more than {limit} coins in a single withdrawal.",
            **kwargs,
        )
        self.required_coins = required_coins
        self.limit = limit
        self.details["required_coins"] = required_coins
        self.details["limit"] = limit


class InvalidAmountError(WithdrawalError):
    """Withdrawal amount is missing, malformed or out of range."""

    pass


# =============================================================================
# Refill Errors
# =============================================================================


class RefillError(AtmError):
    """Base exception for refill failures."""

    pass


class InvalidRefillError(RefillError):
    """Refill request names an unknown denomination or a bad amount."""

    def __init__(
        self,
        invalid: Optional[list[str]] = None,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message
            or (
                "All inputs must be valid denominations for this ATM, "
                "and all input amounts must be positive integers."
            ),
            **kwargs,
        )
        self.invalid = invalid or []
        self.details["invalid"] = self.invalid


class DenominationNotFoundError(RefillError):
    """No denomination with the given value is held by this machine."""

    def __init__(self, value: Any, **kwargs: Any) -> None:
        super().__init__(f"This ATM does not hold {value}-unit denominations.", **kwargs)
        self.value = value
        self.details["denomination"] = str(value)
