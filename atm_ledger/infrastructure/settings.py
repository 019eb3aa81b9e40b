"""
Application settings.

Provides typed configuration sections built from the defaults in ``configs``.
"""

from dataclasses import dataclass, field

from configs import (
    COMMAND_CHANNEL,
    HTTP_HOST,
    HTTP_PORT,
    MAX_COINS_PER_WITHDRAWAL,
    MAXIMUM_WITHDRAWAL,
    REDIS_HOST,
    REDIS_PORT,
    SEED_DENOMINATIONS,
    SeedDenomination,
)


# =============================================================================
# Configuration Classes
# =============================================================================


@dataclass(frozen=True)
class RedisSettings:
    """Redis connection settings."""

    host: str = REDIS_HOST
    port: int = REDIS_PORT
    decode_responses: bool = True


@dataclass(frozen=True)
class HttpSettings:
    """HTTP server settings."""

    host: str = HTTP_HOST
    port: int = HTTP_PORT
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class AtmSettings:
    """Machine limits, seed inventory and command channel."""

    maximum_withdrawal: str = MAXIMUM_WITHDRAWAL
    max_coins_per_withdrawal: int = MAX_COINS_PER_WITHDRAWAL
    seed: tuple[SeedDenomination, ...] = SEED_DENOMINATIONS
    command_channel: str = COMMAND_CHANNEL

    @property
    def response_channel(self) -> str:
        """Get response channel name."""
        return f"{self.command_channel}_response"


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """
    Main application settings.

    Aggregates all configuration sections.
    """

    atm: AtmSettings = field(default_factory=AtmSettings)
    redis: RedisSettings = field(default_factory=RedisSettings)
    http: HttpSettings = field(default_factory=HttpSettings)


# =============================================================================
# Settings Singleton
# =============================================================================


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
