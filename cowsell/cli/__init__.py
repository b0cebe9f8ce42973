"""cowsell CLI package that exposes the Typer application and command helpers."""

from __future__ import annotations

from .core import (
    EXIT_ERROR,
    EXIT_MISSING_ARGUMENT,
    EXIT_OK,
    EXIT_USER_DECLINED,
    app,
    log,
)
from .utils import _build_flow

# Import command modules for side-effect registration
from . import commands
from .commands.sell import sell

__all__ = [
    "EXIT_ERROR",
    "EXIT_MISSING_ARGUMENT",
    "EXIT_OK",
    "EXIT_USER_DECLINED",
    "_build_flow",
    "app",
    "commands",
    "log",
    "sell",
]
