"""
ATM Ledger - Main entry point.

Builds the single Atm for this process, then serves it over HTTP and over
the Redis pub/sub command channel.
"""

import asyncio
import json

import uvicorn
from fastapi import FastAPI
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from application.atm_service import AtmService
from application.command_handler import CommandHandler
from application.http_api import create_app
from domain.atm import Atm
from infrastructure.settings import AtmSettings, HttpSettings, Settings, get_settings
from loggers import logger


# =============================================================================
# Composition
# =============================================================================


def build_service(settings: AtmSettings) -> AtmService:
    """
    Create the machine from its seed inventory and wrap it in a service.

    Args:
        settings: Machine limits and seed.

    Returns:
        AtmService owning the new Atm.
    """
    atm = Atm.from_seed(
        settings.seed,
        maximum_withdrawal=settings.maximum_withdrawal,
        max_coins_per_withdrawal=settings.max_coins_per_withdrawal,
    )
    logger.info(f"ATM initialized with {len(atm.denomination_values())} denominations")
    return AtmService(atm)


# =============================================================================
# Redis Command Listener
# =============================================================================


async def listen_to_redis(
    redis: Redis,
    handler: CommandHandler,
    settings: AtmSettings,
) -> None:
    """
    Listen for commands on Redis pub/sub and process them.

    Args:
        redis: Redis client instance.
        handler: CommandHandler executing each command.
        settings: Provides the command and response channel names.
    """
    pubsub = redis.pubsub()
    try:
        await pubsub.subscribe(settings.command_channel)
        logger.info(f"Listening for commands on channel: {settings.command_channel}")
        await _process_commands(redis, pubsub, handler, settings)
    except RedisError as e:
        logger.error(f"Redis command channel unavailable: {e}")


async def _process_commands(
    redis: Redis,
    pubsub: PubSub,
    handler: CommandHandler,
    settings: AtmSettings,
) -> None:
    """Execute each command received on the channel and publish its response."""
    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue

        raw_data = message.get("data")

        # Handle ping messages
        if raw_data == "ping":
            continue

        try:
            command = json.loads(raw_data)
            if not isinstance(command, dict):
                logger.error(f"Command is not a JSON object: {raw_data}")
                continue
            logger.info(f"Received command: {command}")

            response = await handler.execute(command)

            await redis.publish(settings.response_channel, json.dumps(response))
            logger.info(f"Response sent to {settings.response_channel}: {response}")

        except json.JSONDecodeError as e:
            logger.error(f"Command parsing error: {e}")
        except RedisError as e:
            logger.error(f"Failed to publish response: {e}")


# =============================================================================
# HTTP Server
# =============================================================================


async def serve_http(app: FastAPI, settings: HttpSettings) -> None:
    """Run the uvicorn server until it is asked to stop."""
    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level="info")
    server = uvicorn.Server(config)
    logger.info(f"ATM server is running on http://{settings.host}:{settings.port}/status")
    await server.serve()


# =============================================================================
# Main Entry Point
# =============================================================================


async def main(settings: Settings | None = None) -> None:
    """
    Main entry point for the ATM ledger service.

    Args:
        settings: Settings to run with; the singleton is used when omitted.
    """
    settings = settings or get_settings()

    service = build_service(settings.atm)
    app = create_app(service, settings.http)
    handler = CommandHandler(service)

    redis = Redis(
        host=settings.redis.host,
        port=settings.redis.port,
        decode_responses=settings.redis.decode_responses,
    )

    try:
        await asyncio.gather(
            serve_http(app, settings.http),
            listen_to_redis(redis, handler, settings.atm),
        )
    finally:
        await redis.aclose()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
