"""
Configuration module for the ATM ledger.

This module provides the machine's seed inventory and limits along with
connection settings for the HTTP server, Redis and Loki.
"""

import os
from dataclasses import dataclass
from typing import Final, Optional


# =============================================================================
# Machine Limits
# =============================================================================

MAXIMUM_WITHDRAWAL: Final[str] = "2000"
MAX_COINS_PER_WITHDRAWAL: Final[int] = 50


# =============================================================================
# Seed Inventory
# =============================================================================


@dataclass(frozen=True)
class SeedDenomination:
    """One row of the seed inventory loaded at startup."""

    value: str
    currency_class: str
    count: int


SEED_DENOMINATIONS: Final[tuple[SeedDenomination, ...]] = (
    SeedDenomination("200", "bill", 7),
    SeedDenomination("100", "bill", 4),
    SeedDenomination("20", "bill", 15),
    SeedDenomination("10", "coin", 10),
    SeedDenomination("5", "coin", 1),
    SeedDenomination("1", "coin", 10),
    SeedDenomination("0.1", "coin", 12),
    SeedDenomination("0.01", "coin", 21),
)


# =============================================================================
# HTTP Server Configuration
# =============================================================================

HTTP_HOST: Final[str] = "0.0.0.0"
HTTP_PORT: Final[int] = 3400


# =============================================================================
# Redis Configuration
# =============================================================================

REDIS_HOST: Final[str] = "localhost"
REDIS_PORT: Final[int] = 6379
COMMAND_CHANNEL: Final[str] = "atm_ledger_commands"


# =============================================================================
# Logging Configuration
# =============================================================================

LOG_FILE: Final[str] = os.environ.get("ATM_LEDGER_LOG_FILE", "logs/atm_ledger.log")
LOKI_URL: Final[Optional[str]] = os.environ.get("LOKI_URL")
LOG_LEVEL: Final[str] = os.environ.get("ATM_LEDGER_LOG_LEVEL", "DEBUG").upper()
