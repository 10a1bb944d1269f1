#!/usr/bin/env python3
"""Main entry point for the classroom jukebox queue service."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import logging.config
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from classroom_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from classroom_jukebox.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning("Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH)

    logging.getLogger().setLevel(resolved_level)


async def run(settings: Settings, stop_event: asyncio.Event | None = None) -> None:
    """Run the sync loop until ``stop_event`` is set or a stop signal arrives."""
    from classroom_jukebox.config.container import create_container

    stop = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)

    container = create_container(settings)
    await container.initialize()
    try:
        container.sync_job.start()
        await stop.wait()
    finally:
        await container.shutdown()


def main() -> int:
    from classroom_jukebox.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    if not settings.provider.has_credentials:
        logger.error(ErrorMessages.PROVIDER_CREDENTIALS_REQUIRED)
        return 1

    logger.info(LogTemplates.SERVICE_STARTING.format(environment=settings.environment))

    try:
        asyncio.run(run(settings))
        logger.info(LogTemplates.SERVICE_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.SERVICE_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.SERVICE_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
