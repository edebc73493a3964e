"""Logging configuration for taskmark."""

import logging
import sys

from loguru import logger


def configure_logging(*, verbose: bool = False) -> None:
    """Configure loguru and the stdlib root logger with appropriate level.

    The exporter logs through the stdlib ``logging`` module, so both are set up.
    """
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname).1s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
