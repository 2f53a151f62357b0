from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "timekeeper-stream"


def configure_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """Install a single stream handler on the package logger.

    Calling it again only adjusts the level.
    """
    logger = logging.getLogger("timekeeper")
    resolved = logging.DEBUG if debug else logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger.setLevel(resolved)

    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
