"""End-to-end order flow tests with faked collaborators."""

import logging

import pytest

from cowsell.engine import FlowState, OrderFlow
from cowsell.errors import (
    InsufficientBalanceError,
    UnimplementedSigningPathError,
    UserDeclined,
)
from cowsell.models import OrderDefinition
from cowsell.networks import SETTLEMENT_ADDRESS, VAULT_RELAYER_ADDRESS
from tests.cow_mocks import (
    GOERLI,
    ORDER_UID,
    QUOTE,
    SAFE,
    SELL_TOKEN,
    SIGNER,
    MockChain,
    MockOrderBook,
    MockSafeService,
    MockSigner,
    order_payload,
    scripted_gate,
)

NOW_MS = 1_650_000_000_000


def _flow(answers, *, chain=None, safe_service=None, dry_run=False, confirmations=2):
    gate, script = scripted_gate(*answers)
    flow = OrderFlow(
        network=GOERLI,
        order_book=MockOrderBook(),
        chain=chain or MockChain(),
        gate=gate,
        signer=MockSigner(),
        safe_service=safe_service or MockSafeService(),
        default_slippage_bips=100,
        confirmations=confirmations,
        now_ms=lambda: NOW_MS,
        dry_run=dry_run,
    )
    return flow, script


def _definition(account, **order):
    return OrderDefinition.from_dict(order_payload(account, **order))


EOA = {"accountType": "EOA"}
PRESIGN = {"accountType": "SAFE_WITH_EOA_PRESIGN", "safeAddress": SAFE}
EIP1271 = {"accountType": "SAFE_WITH_EOA_EIP1271", "safeAddress": SAFE}


def test_eoa_order_with_approval() -> None:
    chain = MockChain(balance=10**18, allowance=0)
    flow, script = _flow(["y", "y"], chain=chain)

    result = flow.run(_definition(EOA))

    assert flow.state is FlowState.SUBMITTED
    assert result.order_id == ORDER_UID
    assert result.owner == SIGNER
    assert result.chain_id == 5

    query = flow.order_book.queries[0]
    assert query.from_account == SIGNER
    assert query.valid_to == 1_650_001_800

    # approval sent first, then waited on for mining and confirmations
    assert len(chain.sent) == 1
    assert chain.sent[0].to == SELL_TOKEN
    tx_hash = "0x" + f"{1:064x}"
    assert chain.waits == [(tx_hash, 1), (tx_hash, 2)]
    assert chain.calls[1] == ("allowance", SELL_TOKEN, SIGNER, VAULT_RELAYER_ADDRESS)

    posted = flow.order_book.orders[0]
    assert posted["signing_scheme"] == "eip712"
    assert posted["owner"] == SIGNER
    assert posted["quote_id"] == QUOTE.quote_id
    assert posted["order"].buy_amount == 162931912199872
    assert posted["order"].sell_amount == QUOTE.sell_amount
    assert flow.signer.signed_orders[0][1:] == (5, SETTLEMENT_ADDRESS)
    assert script.questions == [
        "    Approve transaction? (y/n)",
        "Are you sure you want to post this order? (y/n)",
    ]


def test_eoa_order_without_approval_only_asks_to_post() -> None:
    chain = MockChain(balance=10**18, allowance=2**256 - 1)
    flow, script = _flow(["y"], chain=chain)

    flow.run(_definition(EOA))

    assert chain.sent == []
    assert len(script.questions) == 1
    assert len(flow.order_book.orders) == 1


def test_declining_approval_stops_everything() -> None:
    chain = MockChain(allowance=0)
    flow, _ = _flow(["n"], chain=chain)

    with pytest.raises(UserDeclined) as excinfo:
        flow.run(_definition(EOA))

    assert "Not sending the transaction" in excinfo.value.message
    assert chain.sent == []
    assert flow.order_book.orders == []
    assert flow.state is FlowState.FAILED


def test_declining_post_sends_no_order() -> None:
    chain = MockChain(allowance=2**256 - 1)
    flow, _ = _flow(["n"], chain=chain)

    with pytest.raises(UserDeclined):
        flow.run(_definition(EOA))

    assert flow.order_book.orders == []
    assert flow.signer.signed_orders == []


def test_insufficient_balance_fails_before_prompts() -> None:
    chain = MockChain(balance=1)
    flow, script = _flow([], chain=chain)

    with pytest.raises(InsufficientBalanceError):
        flow.run(_definition(EOA))

    assert script.questions == []
    assert flow.state is FlowState.FAILED


def test_dry_run_stops_after_planning(caplog) -> None:
    caplog.set_level(logging.INFO, logger="cowsell")
    chain = MockChain(allowance=0)
    flow, script = _flow([], chain=chain, dry_run=True)

    assert flow.run(_definition(EOA)) is None

    assert chain.sent == []
    assert flow.order_book.orders == []
    assert script.questions == []
    assert "Approve sell token" in caplog.text


def test_presign_account_uses_safe_bundle() -> None:
    chain = MockChain(allowance=2**256 - 1)
    service = MockSafeService(threshold=1)
    flow, _ = _flow(["y", "n"], chain=chain, safe_service=service)

    result = flow.run(_definition(PRESIGN))

    assert result.owner == SAFE
    assert flow.order_book.orders[0]["signing_scheme"] == "presign"
    assert flow.order_book.queries[0].from_account == SAFE
    assert len(service.proposals) == 1
    # Safe flows never send transactions from the signer directly
    assert chain.sent == []


def test_eip1271_without_preparation_is_unimplemented() -> None:
    chain = MockChain(allowance=2**256 - 1)
    flow, _ = _flow([], chain=chain)

    with pytest.raises(UnimplementedSigningPathError) as excinfo:
        flow.run(_definition(EIP1271))

    assert isinstance(excinfo.value, NotImplementedError)
    assert flow.order_book.orders == []
    assert flow.state is FlowState.FAILED


def test_eip1271_with_approval_falls_back_to_presign(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="cowsell")
    chain = MockChain(allowance=0)
    service = MockSafeService(threshold=2)
    flow, _ = _flow(["y"], chain=chain, safe_service=service)

    result = flow.run(_definition(EIP1271))

    assert "You cannot trade gasless yet!" in caplog.text
    assert flow.order_book.orders[0]["signing_scheme"] == "presign"
    assert result.pending_signatures == 1
    assert len(service.proposals) == 1


def test_zero_buy_amount_in_order_file_keeps_slippage_limit() -> None:
    chain = MockChain(allowance=2**256 - 1)
    flow, _ = _flow(["y"], chain=chain)

    flow.run(_definition(EOA, buyAmount="0"))

    posted = flow.order_book.orders[0]["order"]
    assert posted.buy_amount == 162931912199872
    assert flow.signer.signed_orders[0][0].buy_amount == 162931912199872
