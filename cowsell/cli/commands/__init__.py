"""Grouped Typer command modules for the cowsell CLI."""

from __future__ import annotations

from . import sell

__all__ = ["sell"]
