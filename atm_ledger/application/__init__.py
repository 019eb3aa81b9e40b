"""
Application layer - Application services and transports.

Contains:
- ATM service
- Command handler (Redis command channel)
- HTTP API
"""

from .atm_service import AtmService
from .command_handler import CommandHandler, CommandResponse
from .http_api import create_app


__all__ = [
    "AtmService",
    "CommandHandler",
    "CommandResponse",
    "create_app",
]
