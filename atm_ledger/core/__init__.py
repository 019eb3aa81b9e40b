"""
Core module - Foundation layer with no external dependencies.

Contains:
- Exceptions
- Value Objects
"""

from .exceptions import (
    AtmError,
    WithdrawalError,
    InsufficientFundsError,
    CoinLimitExceededError,
    InvalidAmountError,
    RefillError,
    InvalidRefillError,
    DenominationNotFoundError,
)
from .value_objects import (
    CurrencyClass,
    Allocation,
    WithdrawalPlan,
    RefillReceipt,
    to_decimal,
    to_cents,
    is_whole_cents,
    from_cents,
    format_value,
)


__all__ = [
    # Exceptions
    "AtmError",
    "WithdrawalError",
    "InsufficientFundsError",
    "CoinLimitExceededError",
    "InvalidAmountError",
    "RefillError",
    "InvalidRefillError",
    "DenominationNotFoundError",
    # Value Objects
    "CurrencyClass",
    "Allocation",
    "WithdrawalPlan",
    "RefillReceipt",
    "to_decimal",
    "to_cents",
    "is_whole_cents",
    "from_cents",
    "format_value",
]
