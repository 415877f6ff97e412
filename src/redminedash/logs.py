from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_level_from_env(default: int = logging.WARNING) -> int:
    name = os.getenv("RD_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(handler: logging.Handler | None = None) -> None:
    logging.basicConfig(
        level=log_level_from_env(),
        format=LOG_FORMAT,
        handlers=[handler] if handler is not None else None,
    )
