"""Protean Engine runner for the fulfillment domain.

Only needed when events are processed asynchronously (PROTEAN_ENV=production):
the Engine drains the outbox and runs the commerce sync, customer alert,
audit trail and order board handlers, retrying deliveries that fail.

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool = False):
    from fulfillment.domain import fulfillment

    fulfillment.init()
    engine = Engine(fulfillment, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Fulfillment Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
