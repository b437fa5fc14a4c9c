"""Protean Engine runner for the marketplace domain.

Starts the Engine workers that process events asynchronously in
production, where notification fan-out runs outside the request:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes event handlers

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import argparse
import asyncio

import structlog
from protean.server.engine import Engine

from marketplace.domain import marketplace
from marketplace.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


async def run(test_mode: bool = False):
    marketplace.init()
    engine = Engine(marketplace, test_mode=test_mode)
    logger.info("Starting marketplace engine", test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Marketplace Engine runner")
    parser.add_argument("--log-level", help="Override the environment's log level")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging(level=args.log_level)
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
