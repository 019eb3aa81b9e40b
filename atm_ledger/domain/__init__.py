"""
Domain layer - Business logic and domain models.

Contains:
- Denomination stock model
- Greedy allocator
- Atm inventory manager
"""

from .denomination import Denomination
from .allocator import allocate, allocate_cents
from .atm import Atm


__all__ = [
    "Denomination",
    "allocate",
    "allocate_cents",
    "Atm",
]
