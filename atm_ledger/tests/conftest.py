"""
Pytest configuration for ATM ledger tests.

This conftest.py adds the atm_ledger directory to sys.path
so that tests can import modules properly, and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest


# Add the atm_ledger directory to sys.path for proper imports
atm_ledger_path = Path(__file__).parent.parent
if str(atm_ledger_path) not in sys.path:
    sys.path.insert(0, str(atm_ledger_path))


from configs import MAX_COINS_PER_WITHDRAWAL, MAXIMUM_WITHDRAWAL, SEED_DENOMINATIONS  # noqa: E402
from core.value_objects import CurrencyClass  # noqa: E402
from domain.atm import Atm  # noqa: E402
from domain.denomination import Denomination  # noqa: E402


@pytest.fixture
def atm():
    """A machine stocked with the default seed inventory."""
    return Atm.from_seed(SEED_DENOMINATIONS, MAXIMUM_WITHDRAWAL, MAX_COINS_PER_WITHDRAWAL)


@pytest.fixture
def make_atm():
    """Build a machine from ``(value, class, count)`` tuples."""

    def _make(rows, maximum_withdrawal="2000", max_coins=50):
        denominations = [
            Denomination(value, CurrencyClass(currency_class), count)
            for value, currency_class, count in rows
        ]
        return Atm(denominations, maximum_withdrawal, max_coins)

    return _make
