"""Limit price protection.

This is the only place where the order's limit price is decided. All
arithmetic is on Python integers so that token amounts above 2**53 stay exact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cowsell.config import BIPS_DENOMINATOR, DEFAULT_SLIPPAGE_BIPS
from cowsell.errors import ConfigurationError
from cowsell.models import LimitOrderParams, QuoteResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtectedPrice:
    """Limit amounts derived from a quote."""

    sell_amount: int
    buy_amount: int
    buy_amount_quote: int
    slippage_bips: int


def apply_slippage(buy_amount_quote: int, slippage_bips: int) -> int:
    """Return ``floor(buy_amount_quote * (10000 - bips) / 10000)``.

    Raises:
        ConfigurationError: If *slippage_bips* is outside ``[0, 10000)``.
    """

    if slippage_bips < 0 or slippage_bips >= BIPS_DENOMINATOR:
        raise ConfigurationError(
            f"slippageToleranceBips must be in [0, {BIPS_DENOMINATOR}), got {slippage_bips}"
        )
    if buy_amount_quote < 0:
        raise ConfigurationError(f"buy amount must not be negative, got {buy_amount_quote}")
    return buy_amount_quote * (BIPS_DENOMINATOR - slippage_bips) // BIPS_DENOMINATOR


def protect_price(
    quote: QuoteResult,
    order: LimitOrderParams,
    default_bips: int = DEFAULT_SLIPPAGE_BIPS,
) -> ProtectedPrice:
    """Return the limit amounts to place for *quote*.

    ``sellAmount`` passes through unchanged because the quote already deducts
    the fee. The limit is always the quoted buy amount reduced by the slippage
    tolerance; a ``buyAmount`` in the order file is only reported.
    """

    bips = (
        order.slippage_tolerance_bips
        if order.slippage_tolerance_bips is not None
        else default_bips
    )
    after_slippage = apply_slippage(quote.buy_amount, bips)

    if order.buy_amount is not None and order.buy_amount != after_slippage:
        log.warning(
            "Ignoring buyAmount %d from the order file; the limit is %d (%d BIPs below quote %d)",
            order.buy_amount,
            after_slippage,
            bips,
            quote.buy_amount,
        )

    log.info(
        "Apply %d BIPs to expected receive tokens. Accepting %d, expected %d",
        bips,
        after_slippage,
        quote.buy_amount,
    )
    return ProtectedPrice(
        sell_amount=quote.sell_amount,
        buy_amount=after_slippage,
        buy_amount_quote=quote.buy_amount,
        slippage_bips=bips,
    )


__all__ = ["ProtectedPrice", "apply_slippage", "protect_price"]
