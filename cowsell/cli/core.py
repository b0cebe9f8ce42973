"""Core Typer application and logging bootstrap for the cowsell CLI package."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import typer

from cowsell.config import settings

# Exit statuses scripts rely on
EXIT_OK = 0
EXIT_MISSING_ARGUMENT = 99
EXIT_USER_DECLINED = 100
EXIT_ERROR = 200

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    add_completion=False,
    help="Quote, sign and submit CoW Protocol limit orders.",
)
log = logging.getLogger("cowsell")

# Configure logging once with console + optional rotating file handler
if not getattr(log, "_configured", False):
    log.setLevel(getattr(logging, str(settings.log_level).upper(), logging.INFO))
    ch = logging.StreamHandler()
    ch.setLevel(log.level)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(ch)

    log_path = settings.log_file
    if log_path:
        try:
            directory = os.path.dirname(log_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            fh = RotatingFileHandler(
                log_path,
                maxBytes=int(settings.log_max_bytes or 1_000_000),
                backupCount=int(settings.log_backup_count or 3),
            )
        except OSError as exc:
            log.warning("file logging disabled (%s): %s", log_path, exc)
        else:
            fh.setLevel(log.level)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            log.addHandler(fh)
    setattr(log, "_configured", True)

__all__ = [
    "EXIT_ERROR",
    "EXIT_MISSING_ARGUMENT",
    "EXIT_OK",
    "EXIT_USER_DECLINED",
    "app",
    "log",
]
