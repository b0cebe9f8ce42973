"""REST client tests with ``urlopen`` patched out."""

import io
import json
import urllib.error

import pytest

from cowsell.adapters.http import JsonClient
from cowsell.adapters.orderbook import CowOrderBook
from cowsell.adapters.safe_service import SafeTransactionService
from cowsell.errors import OrderBookError, SafeServiceError
from cowsell.models import QuoteQuery, SafeTransaction
from tests.cow_mocks import BUY_TOKEN, ORDER_UID, RAW_ORDER, SAFE, SELL_TOKEN, SIGNER


class FakeResponse:
    def __init__(self, payload):
        self.body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _http_error(code: int, body: bytes = b"") -> urllib.error.HTTPError:
    return urllib.error.HTTPError("http://x", code, "error", {}, io.BytesIO(body))


@pytest.fixture
def urlopen(monkeypatch):
    """Replace ``urlopen`` with a scripted sequence of outcomes."""

    state = {"outcomes": [], "requests": []}

    def fake_urlopen(req, timeout=None):
        state["requests"].append(req)
        outcome = state["outcomes"].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    return state


def _client(sleeps, **kwargs):
    return JsonClient(
        "https://api.example/",
        error_cls=OrderBookError,
        backoff=0.5,
        sleep=sleeps.append,
        **kwargs,
    )


def test_retries_transient_status(urlopen) -> None:
    urlopen["outcomes"] = [_http_error(503), {"ok": True}]
    sleeps = []
    assert _client(sleeps).get("/ping") == {"ok": True}
    assert sleeps == [0.5]
    assert urlopen["requests"][0].full_url == "https://api.example/ping"


def test_gives_up_after_max_retries(urlopen) -> None:
    urlopen["outcomes"] = [_http_error(502)] * 3
    sleeps = []
    with pytest.raises(OrderBookError) as excinfo:
        _client(sleeps, max_retries=3).get("/ping")
    assert sleeps == [0.5, 1.0]
    assert excinfo.value.details["status"] == 502


def test_client_error_is_not_retried(urlopen) -> None:
    urlopen["outcomes"] = [_http_error(400, b'{"errorType":"InsufficientFee"}')]
    sleeps = []
    with pytest.raises(OrderBookError, match="InsufficientFee") as excinfo:
        _client(sleeps).post("/api/v1/orders", {"a": 1})
    assert sleeps == []
    assert excinfo.value.details["status"] == 400
    assert len(urlopen["requests"]) == 1


def test_connection_errors_are_retried(urlopen) -> None:
    urlopen["outcomes"] = [urllib.error.URLError("refused"), b""]
    sleeps = []
    assert _client(sleeps).get("/empty") is None
    assert sleeps == [0.5]


def test_invalid_json_raises(urlopen) -> None:
    urlopen["outcomes"] = [b"<html>"]
    with pytest.raises(OrderBookError, match="invalid JSON"):
        _client([]).get("/ping")


def test_order_book_quote_and_order(urlopen) -> None:
    urlopen["outcomes"] = [
        {
            "quote": {
                "sellAmount": "999724034906366998",
                "buyAmount": "164577689090780",
                "feeAmount": "275965093633002",
            },
            "id": 26755,
        },
        ORDER_UID,
    ]
    book = CowOrderBook("https://api.cow.fi/goerli", sleep=lambda _s: None)
    query = QuoteQuery(
        sell_token=SELL_TOKEN,
        buy_token=BUY_TOKEN,
        sell_amount_before_fee=10**18,
        from_account=SIGNER,
        receiver=SIGNER,
        valid_to=1_650_001_800,
        app_data="0x" + "00" * 32,
    )

    quote = book.get_quote(query)
    uid = book.send_order(
        RAW_ORDER,
        signature="0xsig",
        signing_scheme="eip712",
        owner=SIGNER,
        quote_id=quote.quote_id,
    )

    assert quote.buy_amount == 164577689090780
    assert uid == ORDER_UID
    quote_req, order_req = urlopen["requests"]
    assert quote_req.full_url == "https://api.cow.fi/goerli/api/v1/quote"
    assert quote_req.get_method() == "POST"
    assert json.loads(quote_req.data)["sellAmountBeforeFee"] == str(10**18)
    body = json.loads(order_req.data)
    assert order_req.full_url == "https://api.cow.fi/goerli/api/v1/orders"
    assert body["signingScheme"] == "eip712"
    assert body["signature"] == "0xsig"
    assert body["from"] == SIGNER
    assert body["quoteId"] == 26755
    assert "sellAmountBeforeFee" not in body


def test_order_book_rejects_unexpected_quote(urlopen) -> None:
    urlopen["outcomes"] = [{"errorType": "NoLiquidity"}]
    book = CowOrderBook("https://api.cow.fi/goerli")
    with pytest.raises(OrderBookError, match="Unexpected quote response"):
        book.get_quote(
            QuoteQuery(
                sell_token=SELL_TOKEN,
                buy_token=BUY_TOKEN,
                sell_amount_before_fee=1,
                from_account=SIGNER,
                receiver=SIGNER,
                valid_to=0,
                app_data="0x" + "00" * 32,
            )
        )


def test_safe_service_info_and_proposal(urlopen) -> None:
    urlopen["outcomes"] = [
        {"address": SAFE, "nonce": 4, "threshold": 2, "owners": [SIGNER]},
        b"",
    ]
    service = SafeTransactionService("https://safe-transaction.goerli.gnosis.io")

    info = service.get_safe_info(SAFE)
    safe_tx = SafeTransaction(to=SAFE, value=0, data="0x", operation=0, nonce=info.nonce)
    service.propose_transaction(
        SAFE, safe_tx, safe_tx_hash="0x" + "4b" * 32, sender=SIGNER, signature="0x6c"
    )

    assert info.nonce == 4 and info.threshold == 2
    info_req, propose_req = urlopen["requests"]
    assert info_req.full_url.endswith(f"/api/v1/safes/{SAFE}/")
    assert info_req.get_method() == "GET"
    assert propose_req.full_url.endswith(f"/api/v1/safes/{SAFE}/multisig-transactions/")
    body = json.loads(propose_req.data)
    assert body["contractTransactionHash"] == "0x" + "4b" * 32
    assert body["nonce"] == 4
    assert body["sender"] == SIGNER
    assert body["signature"] == "0x6c"


def test_safe_service_errors(urlopen) -> None:
    urlopen["outcomes"] = [_http_error(404, b"Not found")]
    service = SafeTransactionService("https://safe-transaction.goerli.gnosis.io")
    with pytest.raises(SafeServiceError, match="404"):
        service.get_safe_info(SAFE)
