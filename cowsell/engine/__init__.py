"""Order lifecycle engine: quoting, pricing, planning and authorization."""

from __future__ import annotations

from .approvals import plan_approval, presign_operation
from .dispatcher import FlowState, OrderFlow
from .pricing import ProtectedPrice, apply_slippage, protect_price
from .quote import (
    build_quote_query,
    deadline_from,
    resolve_trading_accounts,
    to_raw_order,
)
from .safe import SafeCoordinator, bundle_operations

__all__ = [
    "FlowState",
    "OrderFlow",
    "ProtectedPrice",
    "SafeCoordinator",
    "apply_slippage",
    "build_quote_query",
    "bundle_operations",
    "deadline_from",
    "plan_approval",
    "presign_operation",
    "protect_price",
    "resolve_trading_accounts",
    "to_raw_order",
]
