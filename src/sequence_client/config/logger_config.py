"""Logger configuration for the Sequence client.

The package disables its own loguru output on import so that it stays quiet
inside host applications. ``setup_logging`` turns it back on.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

PACKAGE_NAME = "sequence_client"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    console: bool = True,
) -> None:
    """Configure loguru for console and optional file output.

    Args:
        level: Minimum log level
        log_file: Path of a rotating log file, None to skip file logging
        rotation: When to rotate the log file
        retention: How long rotated files are kept
        console: Whether to log to stderr
    """

    # Remove default loguru handler
    logger.remove()
    logger.enable(PACKAGE_NAME)

    if console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=level,
            colorize=True,
        )

    if log_file:
        logger.add(
            sink=str(log_file),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=level,
            rotation=rotation,
            retention=retention,
            compression="gz",  # Compress rotated logs
            enqueue=True,  # Sends run on worker threads
        )

        logger.info(f"File logging enabled: {log_file}")


def disable_logging() -> None:
    """Silence all log output from the client package."""
    logger.disable(PACKAGE_NAME)
