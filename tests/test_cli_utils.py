"""Tests for CLI utility helpers."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from cowsell.adapters import LocalSigner, SafeTransactionService
from cowsell.cli import utils as cli_utils
from cowsell.config import ZERO_APP_DATA
from cowsell.errors import ConfigurationError
from cowsell.models import OrderDefinition
from tests.cow_mocks import SAFE, order_payload, scripted_gate

HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"

EOA = {"accountType": "EOA"}
PRESIGN = {"accountType": "SAFE_WITH_EOA_PRESIGN", "safeAddress": SAFE}


def _settings(**overrides) -> SimpleNamespace:
    values = dict(
        mnemonic=None,
        chain_id=None,
        rpc_url="http://node:8545",
        infura_key=None,
        app_data=ZERO_APP_DATA,
        default_slippage_bips=100,
        number_confirmations_wait=1,
        tx_wait_timeout_secs=600.0,
        max_gas_price_gwei=None,
        order_book_url=None,
        safe_service_url=None,
        http_timeout_secs=10.0,
        http_max_retries=3,
        http_backoff_secs=0.5,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def connections(monkeypatch):
    """Record RPC connections instead of creating web3 clients."""

    opened: list[str] = []

    def fake_connect(rpc_url):
        opened.append(rpc_url)
        return SimpleNamespace(eth=None)

    monkeypatch.setattr(cli_utils, "connect", fake_connect)
    return opened


def _build(account, settings, *, dry_run=False, **payload):
    data = order_payload(account)
    data.update(payload)
    gate, _ = scripted_gate()
    return cli_utils._build_flow(
        OrderDefinition.from_dict(data), settings, gate=gate, dry_run=dry_run
    )


def test_eoa_without_mnemonic_is_rejected(connections) -> None:
    with pytest.raises(ConfigurationError, match="MNEMONIC"):
        _build(EOA, _settings())
    assert connections == []


def test_eoa_dry_run_still_needs_mnemonic(connections) -> None:
    with pytest.raises(ConfigurationError, match="MNEMONIC"):
        _build(EOA, _settings(), dry_run=True)
    assert connections == []


def test_missing_rpc_endpoint_is_rejected(connections) -> None:
    with pytest.raises(ConfigurationError, match="INFURA_KEY or RPC_URL"):
        _build(EOA, _settings(rpc_url=None, mnemonic=HARDHAT_MNEMONIC))
    assert connections == []


def test_unsupported_chain_is_rejected(connections) -> None:
    with pytest.raises(ConfigurationError, match="supported chainId"):
        _build(EOA, _settings(mnemonic=HARDHAT_MNEMONIC), chainId=42)
    assert connections == []


def test_chain_falls_back_to_settings(connections) -> None:
    network, flow = _build(
        EOA, _settings(mnemonic=HARDHAT_MNEMONIC, chain_id=100), chainId=None
    )
    assert network.chain_id == 100
    assert flow.network is network


def test_eoa_flow_is_wired(connections) -> None:
    network, flow = _build(EOA, _settings(mnemonic=HARDHAT_MNEMONIC))

    assert network.name == "goerli"
    assert isinstance(flow.signer, LocalSigner)
    assert flow.signer.address == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    assert flow.chain.account is flow.signer.account
    assert flow.safe_service is None
    assert flow.order_book.client.base_url == "https://api.cow.fi/goerli"
    assert connections == ["http://node:8545"]


def test_safe_dry_run_without_mnemonic_builds_read_only_flow(connections) -> None:
    _, flow = _build(PRESIGN, _settings(), dry_run=True)

    assert flow.signer is None
    assert flow.chain.account is None
    assert flow.dry_run is True
    assert isinstance(flow.safe_service, SafeTransactionService)


def test_safe_order_without_mnemonic_is_rejected(connections) -> None:
    with pytest.raises(ConfigurationError, match="MNEMONIC"):
        _build(PRESIGN, _settings())
    assert connections == []


def test_service_url_overrides(connections) -> None:
    _, flow = _build(
        PRESIGN,
        _settings(
            mnemonic=HARDHAT_MNEMONIC,
            order_book_url="http://orderbook.local",
            safe_service_url="http://safe.local/",
        ),
    )
    assert flow.order_book.client.base_url == "http://orderbook.local"
    assert flow.safe_service.client.base_url == "http://safe.local"
