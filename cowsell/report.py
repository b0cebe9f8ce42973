"""Console reporting for each phase of an order run."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import typer

from .models import OnchainOperation, SafeInfo
from .networks import Network

log = logging.getLogger("cowsell")


def pretty(payload: Any) -> str:
    """Return *payload* as indented JSON for logs."""

    return json.dumps(payload, indent=2, default=str)


def log_operations(operations: Iterable[OnchainOperation], heading: str) -> None:
    """Log numbered operations with target and calldata."""

    ops = list(operations)
    if not ops:
        return
    log.info("%d %s", len(ops), heading)
    for number, op in enumerate(ops, start=1):
        log.info("    [%d/%d] %s", number, len(ops), op.description)
        log.info("          To: %s", op.tx_request.to)
        log.info("          Tx Data: %s", op.tx_request.data)


def log_safe_info(info: SafeInfo) -> None:
    log.info("Using safe:")
    log.info("    Address: %s", info.address)
    log.info("    Threshold: %d out of %d", info.threshold, len(info.owners))
    log.info("    Owners: %s", ", ".join(info.owners))
    log.info("    Current Nonce: %d", info.nonce)


def print_order_submitted(network: Network, order_id: str, owner: str) -> None:
    """Echo the explorer links for a submitted order.

    The first line is stable; scripts scrape the order URL from it.
    """

    typer.echo(f"The order has been submitted. See {network.order_url(order_id)}")
    typer.echo(f"See full history in {network.address_url(owner)}")


__all__ = ["log_operations", "log_safe_info", "pretty", "print_order_submitted"]
