#!/usr/bin/env python3
"""
Salon booking engine - slot availability and verified appointment booking.

Main entry point for the application.
"""

import argparse
import asyncio
import sys

from loguru import logger

from salon_booking.core.config.settings import get_settings
from salon_booking.core.exceptions import ConfigurationError
from salon_booking.core.logger import setup_structured_logging
from salon_booking.engine import BookingEngine


def run_web_mode(host: str, port: int) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    logger.info(f"Starting booking API on {host}:{port}...")
    uvicorn.run("web.app:create_app", factory=True, host=host, port=port, log_config=None)


async def run_cleanup_once() -> None:
    """Drop expired drafts and one-time codes from the ephemeral store, then exit."""
    engine = BookingEngine.from_settings()
    await engine.start()
    try:
        removed = await engine.flow.cleanup_expired()
        logger.info(f"Cleanup removed {removed} expired entries")
    finally:
        try:
            await asyncio.wait_for(engine.stop(), timeout=10)
        except asyncio.TimeoutError:
            logger.error("Engine stop timed out after 10s")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Salon booking engine")
    parser.add_argument(
        "--mode",
        choices=["web", "cleanup"],
        default="web",
        help="Run mode: web (HTTP API, default), cleanup (one-shot expiry sweep)",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for web mode")
    parser.add_argument("--port", type=int, default=8000, help="Port for web mode")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides LOG_LEVEL)",
    )

    args = parser.parse_args()

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_structured_logging(args.log_level or settings.log_level, json_format=settings.log_json)

    try:
        if args.mode == "cleanup":
            asyncio.run(run_cleanup_once())
        else:
            run_web_mode(args.host, args.port)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
