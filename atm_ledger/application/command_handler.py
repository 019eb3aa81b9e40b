"""
Command Handler - Routes Redis commands to ATM service operations.

Provides clean command routing with validation and error handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from application.atm_service import AtmService
from core.exceptions import AtmError
from core.value_objects import format_value
from loggers import logger


# Type alias for command handlers
CommandHandlerFunc = Callable[..., Awaitable[dict[str, Any]]]


@dataclass
class CommandResponse:
    """
    Standardized response for command execution.

    Attributes:
        command_id: The ID of the executed command.
        success: Whether the command succeeded.
        message: Human-readable message.
        data: Optional response data.
        error: Structured error details when an ATM operation failed.
    """

    command_id: Optional[Any] = None
    success: bool = False
    message: Optional[str] = None
    data: Any = None
    error: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the response to a dictionary."""
        return {
            "command_id": self.command_id,
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error": self.error,
        }


@dataclass
class CommandDefinition:
    """
    Definition of a command.

    Attributes:
        name: Command name.
        handler: Handler function.
        required_args: List of required argument names.
        description: Human-readable description.
    """

    name: str
    handler: CommandHandlerFunc
    required_args: list[str]
    description: str = ""


class CommandHandler:
    """
    Routes commands to their appropriate handlers.

    Each handler calls into the AtmService and shapes the result into a
    ``{"success", "message", "data"}`` dictionary.
    """

    def __init__(self, service: AtmService) -> None:
        """
        Initialize the command handler.

        Args:
            service: The AtmService instance.
        """
        self._service = service
        self._commands: dict[str, CommandDefinition] = {}
        self._register_default_commands()

    def _register_default_commands(self) -> None:
        """Register all default command handlers."""
        self.register("status", self._status, [], "Liveness check")
        self.register(
            "withdraw",
            self._withdraw,
            ["amount"],
            "Withdraw the specified amount",
        )
        self.register(
            "refill",
            self._refill,
            ["money"],
            "Add units to one or more denominations",
        )
        self.register(
            "list_denominations",
            self._list_denominations,
            [],
            "List denomination values, highest first",
        )
        self.register(
            "get_maximum_withdrawal",
            self._get_maximum_withdrawal,
            [],
            "Get the maximum amount of a single withdrawal",
        )
        self.register(
            "inventory_status",
            self._inventory_status,
            [],
            "Get units in stock per denomination",
        )

    def register(
        self,
        command_name: str,
        handler: CommandHandlerFunc,
        required_args: list[str],
        description: str = "",
    ) -> None:
        """
        Register a command handler.

        Args:
            command_name: The name of the command.
            handler: The async handler function.
            required_args: List of required argument names.
            description: Human-readable description.
        """
        self._commands[command_name] = CommandDefinition(
            name=command_name,
            handler=handler,
            required_args=required_args,
            description=description,
        )

    def get_available_commands(self) -> list[dict[str, Any]]:
        """Get list of available commands with their descriptions."""
        return [
            {
                "name": cmd.name,
                "required_args": cmd.required_args,
                "description": cmd.description,
            }
            for cmd in self._commands.values()
        ]

    async def execute(self, command_data: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a command based on command data.

        Args:
            command_data: Dictionary containing 'command', 'command_id', and 'data'.

        Returns:
            Response dictionary with execution result.
        """
        command = command_data.get("command")
        command_id = command_data.get("command_id")
        data = command_data.get("data", {}) or {}

        response = CommandResponse(command_id=command_id)

        if command not in self._commands:
            logger.warning(f"Unknown command: {command}")
            response.message = f"Unknown command: {command}"
            return response.to_dict()

        definition = self._commands[command]

        try:
            kwargs = {arg: data.get(arg) for arg in definition.required_args}

            missing = [arg for arg in definition.required_args if kwargs.get(arg) is None]
            if missing:
                response.message = f"Missing required arguments: {missing}"
                return response.to_dict()

            result = await definition.handler(**kwargs)

            response.success = result.get("success", False)
            response.message = result.get("message")
            response.data = result.get("data")

        except AtmError as e:
            logger.warning(f"Command '{command}' rejected: {e.message}")
            response.message = e.message
            response.error = e.to_dict()
        except Exception as e:
            logger.error(f"Error executing command '{command}': {e}")
            response.message = f"Error: {e}"

        return response.to_dict()

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _status(self) -> dict[str, Any]:
        return {"success": True, "message": "OK"}

    async def _withdraw(self, amount: Any) -> dict[str, Any]:
        plan = await self._service.withdraw(amount)
        return {
            "success": True,
            "message": f"Dispensed {format_value(plan.total)}",
            "data": plan.to_dict(),
        }

    async def _refill(self, money: Any) -> dict[str, Any]:
        receipts = await self._service.refill(money)
        return {
            "success": True,
            "message": "; ".join(receipt.message for receipt in receipts),
            "data": [receipt.to_dict() for receipt in receipts],
        }

    async def _list_denominations(self) -> dict[str, Any]:
        values = await self._service.list_denomination_values()
        return {
            "success": True,
            "message": "OK",
            "data": [format_value(value) for value in values],
        }

    async def _get_maximum_withdrawal(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "OK",
            "data": format_value(self._service.get_maximum_withdrawal()),
        }

    async def _inventory_status(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "OK",
            "data": await self._service.inventory_status(),
        }
