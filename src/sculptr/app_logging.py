"""Logging configuration helpers."""

import logging


def configure_logging(level: str | int = "INFO") -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("sculptr")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
