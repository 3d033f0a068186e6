"""
Console logging setup.

Library modules log through loguru's global logger and never configure
it; scripts call setup_logging() once.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level="INFO", show_time=True):
    """
    Replace loguru's default handler with a single stderr sink.

    Args:
        level: Minimum level (DEBUG shows per-patch wall density ranges)
        show_time: Prefix records with a timestamp

    Returns:
        The configured loguru logger
    """
    logger.remove()

    fmt = LOG_FORMAT
    if show_time:
        fmt = "<green>{time:HH:mm:ss.SSS}</green> | " + fmt

    logger.add(sys.stderr, format=fmt, level=level, colorize=True)
    return logger
