"""Threshold-signature coordination for Safe trading accounts.

Every on-chain step a Safe order needs (approval, pre-signature) goes into a
single Safe transaction so that the owners approve and execute it atomically.
The transaction is proposed to the Safe transaction service with the local
owner's signature; when that signature alone meets the threshold the user may
execute it straight away.
"""

from __future__ import annotations

import logging
from typing import Sequence

from cowsell.adapters.base import (
    ChainAdapter,
    OrderBookAdapter,
    SafeServiceAdapter,
    Signer,
)
from cowsell.contracts import CALL, DELEGATE_CALL, encode_multisend
from cowsell.models import (
    OnchainOperation,
    RawOrder,
    SafeInfo,
    SafeTransaction,
    SubmissionResult,
)
from cowsell.networks import Network
from cowsell.prompt import ConfirmationGate
from cowsell.report import log_operations, log_safe_info, pretty

from .approvals import presign_operation

log = logging.getLogger(__name__)


def bundle_operations(
    operations: Sequence[OnchainOperation], *, nonce: int, multisend: str
) -> SafeTransaction:
    """Return one Safe transaction executing *operations* in order.

    A single operation is called directly; several are packed into a
    ``multiSend`` delegate call.
    """

    if not operations:
        raise ValueError("Nothing to bundle: at least one operation is required")
    if len(operations) == 1:
        tx = operations[0].tx_request
        return SafeTransaction(
            to=tx.to, value=tx.value, data=tx.data, operation=CALL, nonce=nonce
        )
    calls = [
        (CALL, op.tx_request.to, op.tx_request.value, op.tx_request.data)
        for op in operations
    ]
    return SafeTransaction(
        to=multisend,
        value=0,
        data=encode_multisend(calls),
        operation=DELEGATE_CALL,
        nonce=nonce,
    )


class SafeCoordinator:
    """Post a pre-signed order and propose its Safe transaction."""

    def __init__(
        self,
        *,
        network: Network,
        order_book: OrderBookAdapter,
        safe_service: SafeServiceAdapter,
        chain: ChainAdapter,
        signer: Signer,
        gate: ConfirmationGate,
    ) -> None:
        self.network = network
        self.order_book = order_book
        self.safe_service = safe_service
        self.chain = chain
        self.signer = signer
        self.gate = gate

    def submit(
        self,
        raw_order: RawOrder,
        operations: Sequence[OnchainOperation],
        *,
        quote_id: int | None = None,
    ) -> SubmissionResult:
        safe_address = raw_order.from_account
        info = self.safe_service.get_safe_info(safe_address)
        log_safe_info(info)

        self.gate.require(
            "Are you sure you want to post this order?",
            "Understood! Not sending the order. Have a nice day",
        )
        # The order must be in the book before the on-chain pre-signature is useful.
        order_id = self.order_book.send_order(
            raw_order,
            signature=safe_address,
            signing_scheme="presign",
            owner=safe_address,
            quote_id=quote_id,
        )
        log.info(
            "Pre-sign order posted. See %s", self.network.order_url(order_id)
        )

        bundle = list(operations)
        bundle.append(presign_operation(order_id, self.network.settlement))
        log_operations(bundle, "Bundling Transactions: Using Gnosis Safe")

        safe_tx = bundle_operations(
            bundle, nonce=info.nonce, multisend=self.network.multisend
        )
        safe_tx_hash, signature = self._propose(info, safe_tx)
        executed = self._maybe_execute(info, safe_tx, signature)

        return SubmissionResult(
            order_id=order_id,
            owner=safe_address,
            chain_id=self.network.chain_id,
            safe_tx_hash=safe_tx_hash,
            executed_tx_hash=executed,
            pending_signatures=max(info.threshold - 1, 0),
        )

    def _propose(self, info: SafeInfo, safe_tx: SafeTransaction) -> tuple[str, str]:
        chain_id = self.network.chain_id
        safe_tx_hash = self.signer.safe_transaction_hash(safe_tx, chain_id, info.address)
        signature = self.signer.sign_safe_transaction(safe_tx, chain_id, info.address)

        queue_url = self.network.safe_queue_url(info.address)
        log.info(
            "Propose Bundled Transaction: In UI (%s)\n%s",
            queue_url,
            pretty(
                {
                    "safeAddress": info.address,
                    "safeTxHash": safe_tx_hash,
                    "senderAddress": self.signer.address,
                    "to": safe_tx.to,
                    "operation": safe_tx.operation,
                    "nonce": safe_tx.nonce,
                }
            ),
        )
        self.safe_service.propose_transaction(
            info.address,
            safe_tx,
            safe_tx_hash=safe_tx_hash,
            sender=self.signer.address,
            signature=signature,
        )
        log.info("Safe transaction has been created: See %s", queue_url)
        return safe_tx_hash, signature

    def _maybe_execute(
        self, info: SafeInfo, safe_tx: SafeTransaction, signature: str
    ) -> str | None:
        if info.threshold != 1:
            log.info(
                "Order created, but more signatures are required: The order will "
                "need to be signed by other %d signer(s)",
                info.threshold - 1,
            )
            return None

        execute = self.gate.confirm(
            "Would you also like to execute the transaction? This step is not "
            "strictly required. Anyone can execute now the transaction using the UI"
        )
        if not execute:
            log.info("OK remember someone will need to execute before the order expires")
            return None

        tx_hash = self.chain.execute_safe_transaction(info.address, safe_tx, signature)
        log.info(
            "Safe transaction has been sent: Review in block explorer: %s",
            self.network.tx_url(tx_hash),
        )
        return tx_hash


__all__ = ["SafeCoordinator", "bundle_operations"]
