"""Command-line submission of CoW Protocol limit orders."""

from __future__ import annotations

from .errors import CowsellError
from .models import (
    AccountType,
    OnchainOperation,
    OrderDefinition,
    QuoteQuery,
    QuoteResult,
    RawOrder,
    load_order_definition,
)

__all__ = [
    "AccountType",
    "CowsellError",
    "OnchainOperation",
    "OrderDefinition",
    "QuoteQuery",
    "QuoteResult",
    "RawOrder",
    "load_order_definition",
]
