"""Logging configuration."""

import sys

from loguru import logger

from settings import LOG_DIR, LOG_JSON, LOG_LEVEL


def setup_logging(level: str | None = None, to_file: bool = True, serialize: bool = LOG_JSON):
    """Configure console logging plus an optional daily log file.

    serialize switches the file sink to loguru's JSON records, one per line.
    """
    logger.remove()
    level = (level or LOG_LEVEL).upper()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / ("agency_{time:YYYY-MM-DD}.jsonl" if serialize else "agency_{time:YYYY-MM-DD}.log"),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="gz",
            serialize=serialize,
            enqueue=True,
        )
        logger.debug("Logging to {} (level {})", LOG_DIR, level)

    return logger
