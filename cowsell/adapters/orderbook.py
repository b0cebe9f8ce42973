"""CoW Protocol order book REST client."""

from __future__ import annotations

import logging
from typing import Any

from cowsell.errors import OrderBookError
from cowsell.models import QuoteQuery, QuoteResult, RawOrder

from .base import OrderBookAdapter, SigningScheme
from .http import JsonClient

log = logging.getLogger("cowsell")


class CowOrderBook(OrderBookAdapter):
    """Quote and order submission against ``{base_url}/api/v1``."""

    def __init__(self, base_url: str, **client_kwargs: Any) -> None:
        self.client = JsonClient(base_url, error_cls=OrderBookError, **client_kwargs)

    def get_quote(self, query: QuoteQuery) -> QuoteResult:
        payload = self.client.post("/api/v1/quote", query.to_api())
        if not isinstance(payload, dict) or "quote" not in payload:
            raise OrderBookError("Unexpected quote response", details={"body": payload})
        log.debug("quote response: %s", payload)
        return QuoteResult.from_api(payload)

    def send_order(
        self,
        order: RawOrder,
        *,
        signature: str,
        signing_scheme: SigningScheme,
        owner: str,
        quote_id: int | None = None,
    ) -> str:
        body = order.to_api()
        body.update({"signature": signature, "signingScheme": signing_scheme, "from": owner})
        if quote_id is not None:
            body["quoteId"] = quote_id
        uid = self.client.post("/api/v1/orders", body)
        if not isinstance(uid, str) or not uid.startswith("0x"):
            raise OrderBookError("Unexpected order response", details={"body": uid})
        return uid


__all__ = ["CowOrderBook"]
