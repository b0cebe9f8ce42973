"""Quote request construction and raw order conversion."""

from __future__ import annotations

from cowsell.config import DEADLINE_OFFSET_MS
from cowsell.errors import ConfigurationError
from cowsell.models import (
    Account,
    EoaAccount,
    LimitOrderParams,
    QuoteQuery,
    QuoteResult,
    RawOrder,
    SafeEip1271Account,
    SafePresignAccount,
)


def resolve_trading_accounts(
    account: Account, signing_account: str | None, receiver: str | None = None
) -> tuple[str, str]:
    """Return ``(from_account, receiver)`` for *account*.

    EOA accounts trade from the signing address; Safe accounts trade from the
    Safe. The receiver defaults to whichever account trades.
    """

    if isinstance(account, EoaAccount):
        if not signing_account:
            raise ConfigurationError("The signer address is missing")
        from_account = signing_account
    elif isinstance(account, (SafePresignAccount, SafeEip1271Account)):
        from_account = account.safe_address
    else:  # pragma: no cover - closed union
        raise ConfigurationError(f"Unsupported account {account!r}")
    return from_account, receiver or from_account


def deadline_from(now_ms: int, offset_ms: int = DEADLINE_OFFSET_MS) -> int:
    """Return ``ceil((now_ms + offset_ms) / 1000)`` using integer arithmetic."""

    return -(-(now_ms + offset_ms) // 1000)


def build_quote_query(
    order: LimitOrderParams,
    *,
    from_account: str,
    receiver: str,
    app_data: str,
    now_ms: int,
) -> QuoteQuery:
    """Assemble the sell-kind quote request for *order*.

    ``app_data`` is the configured default; an ``appData`` in the order file
    takes precedence.
    """

    if not from_account or not receiver:
        raise ConfigurationError("Trading account and receiver are required for a quote")
    return QuoteQuery(
        sell_token=order.sell_token,
        buy_token=order.buy_token,
        sell_amount_before_fee=order.sell_amount_before_fee,
        from_account=from_account,
        receiver=receiver,
        valid_to=deadline_from(now_ms),
        app_data=order.app_data or app_data,
        partially_fillable=bool(order.partially_fillable),
    )


def to_raw_order(
    query: QuoteQuery, quote: QuoteResult, *, sell_amount: int, buy_amount: int
) -> RawOrder:
    """Return the order to sign from *query* with the protected limit price."""

    return RawOrder(
        sell_token=query.sell_token,
        buy_token=query.buy_token,
        receiver=query.receiver,
        sell_amount=sell_amount,
        buy_amount=buy_amount,
        valid_to=query.valid_to,
        app_data=query.app_data,
        fee_amount=quote.fee_amount,
        from_account=query.from_account,
        partially_fillable=query.partially_fillable,
        kind=query.kind,
        sell_token_balance=query.sell_token_balance,
        buy_token_balance=query.buy_token_balance,
    )


__all__ = [
    "build_quote_query",
    "deadline_from",
    "resolve_trading_accounts",
    "to_raw_order",
]
