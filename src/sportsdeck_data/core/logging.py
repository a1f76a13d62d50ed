"""Logging setup for pipeline entry points."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO", *, force: bool = False) -> None:
    """Configure the root logger once for the process."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
