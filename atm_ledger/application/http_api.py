"""
HTTP API - FastAPI routes in front of the ATM service.

Maps ATM failures to status codes: insufficient funds is a conflict (409),
every other rejection is a bad request (400).
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from application.atm_service import AtmService
from core.exceptions import AtmError, InsufficientFundsError
from core.value_objects import format_value
from infrastructure.settings import HttpSettings
from loggers import logger


# =============================================================================
# Request Bodies
# =============================================================================


class WithdrawalRequest(BaseModel):
    """Body of ``POST /atm/withdrawal``; the amount is validated by the service."""

    amount: Any = None


class RefillRequest(BaseModel):
    """Body of ``POST /atm/refill``: denomination value -> units to add."""

    money: Any = None


# =============================================================================
# Application Factory
# =============================================================================


def status_code_for(error: AtmError) -> int:
    """HTTP status for an ATM failure."""
    if isinstance(error, InsufficientFundsError):
        return 409
    return 400


def create_app(service: AtmService, settings: Optional[HttpSettings] = None) -> FastAPI:
    """
    Build the FastAPI application around an ATM service.

    Args:
        service: Service every route delegates to.
        settings: HTTP settings (CORS origins); defaults apply when omitted.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or HttpSettings()

    app = FastAPI(title="ATM Ledger")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AtmError)
    async def handle_atm_error(request: Request, exc: AtmError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=status_code_for(exc), content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request: malformed request body.",
                "code": "RequestValidationError",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.get("/status")
    async def status() -> dict[str, str]:
        return {"message": "OK"}

    @app.post("/atm/withdrawal")
    async def withdrawal(body: WithdrawalRequest) -> dict[str, Any]:
        plan = await service.withdraw(body.amount)
        return {"result": plan.to_dict()}

    @app.post("/atm/refill")
    async def refill(body: RefillRequest) -> dict[str, Any]:
        receipts = await service.refill(body.money)
        return {"messages": [receipt.message for receipt in receipts]}

    @app.get("/atm/denominations")
    async def denominations() -> dict[str, Any]:
        values = await service.list_denomination_values()
        return {
            "denominations": [format_value(value) for value in values],
            "maximum_withdrawal": format_value(service.get_maximum_withdrawal()),
        }

    @app.get("/atm/inventory")
    async def inventory() -> dict[str, Any]:
        return await service.inventory_status()

    return app
