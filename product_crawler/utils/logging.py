from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 5


def setup_logging(level: str | int | None = None, log_dir: Optional[str] = None) -> None:
    """
    Configure application logging with a consistent formatter.
    With ``log_dir``, also write rotating ``crawler.log`` (all records) and ``error.log`` (errors only).
    """
    if level is None:
        level = os.getenv("CRAWLER_LOG_LEVEL", "INFO")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(Path(log_dir) / "crawler.log", maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        )
        errors = RotatingFileHandler(Path(log_dir) / "error.log", maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        errors.setLevel(logging.ERROR)
        handlers.append(errors)

    logging.basicConfig(level=level, format=_FORMAT, handlers=handlers, force=True)
