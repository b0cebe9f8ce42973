"""Shared helpers wiring settings into the order flow."""

from __future__ import annotations

import logging
from typing import Any

from cowsell.adapters import (
    CowOrderBook,
    LocalSigner,
    SafeTransactionService,
    Web3Chain,
    connect,
)
from cowsell.engine import OrderFlow
from cowsell.models import EoaAccount, OrderDefinition
from cowsell.networks import Network, get_network, rpc_endpoint
from cowsell.prompt import ConfirmationGate

log = logging.getLogger("cowsell")


def _build_flow(
    definition: OrderDefinition,
    settings: Any,
    *,
    gate: ConfirmationGate,
    dry_run: bool = False,
) -> tuple[Network, OrderFlow]:
    """Return the network and a ready :class:`OrderFlow` for *definition*.

    Every configuration problem (chain, RPC endpoint, credential) is raised
    here, before any network call is made.
    """

    network = get_network(
        definition.chain_id if definition.chain_id is not None else settings.chain_id
    )
    rpc_url = rpc_endpoint(
        network, rpc_url=settings.rpc_url, infura_key=settings.infura_key
    )

    is_eoa = isinstance(definition.account, EoaAccount)
    signer = None
    if settings.mnemonic or is_eoa or not dry_run:
        signer = LocalSigner.from_mnemonic(settings.mnemonic)

    chain = Web3Chain(
        connect(rpc_url),
        signer.account if signer else None,
        tx_wait_timeout=float(settings.tx_wait_timeout_secs),
        max_gas_price_gwei=settings.max_gas_price_gwei,
    )
    client_kwargs = {
        "timeout": float(settings.http_timeout_secs),
        "max_retries": int(settings.http_max_retries),
        "backoff": float(settings.http_backoff_secs),
    }
    order_book = CowOrderBook(
        settings.order_book_url or network.order_book_url, **client_kwargs
    )
    safe_service = None
    if not is_eoa:
        safe_service = SafeTransactionService(
            settings.safe_service_url or network.safe_service_url, **client_kwargs
        )

    log.info(
        "CoW order flow initialized. Signing Account: %s, Network: %s (%d)",
        signer.address if signer else "Undefined",
        network.name,
        network.chain_id,
    )
    flow = OrderFlow(
        network=network,
        order_book=order_book,
        chain=chain,
        gate=gate,
        signer=signer,
        safe_service=safe_service,
        app_data=settings.app_data,
        default_slippage_bips=int(settings.default_slippage_bips),
        confirmations=int(settings.number_confirmations_wait),
        dry_run=dry_run,
    )
    return network, flow


__all__ = ["_build_flow"]
