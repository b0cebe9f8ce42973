"""Safe transaction service REST client."""

from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address

from cowsell.errors import SafeServiceError
from cowsell.models import SafeInfo, SafeTransaction

from .base import SafeServiceAdapter
from .http import JsonClient

ORIGIN = "cowsell"


class SafeTransactionService(SafeServiceAdapter):
    """Read Safe metadata and queue multisig transactions."""

    def __init__(self, base_url: str, **client_kwargs: Any) -> None:
        self.client = JsonClient(base_url, error_cls=SafeServiceError, **client_kwargs)

    def get_safe_info(self, safe_address: str) -> SafeInfo:
        payload = self.client.get(f"/api/v1/safes/{to_checksum_address(safe_address)}/")
        if not isinstance(payload, dict):
            raise SafeServiceError("Unexpected safe info response", details={"body": payload})
        try:
            return SafeInfo.from_api(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise SafeServiceError(
                f"Malformed safe info response: {exc}", details={"body": payload}
            ) from exc

    def propose_transaction(
        self,
        safe_address: str,
        safe_tx: SafeTransaction,
        *,
        safe_tx_hash: str,
        sender: str,
        signature: str,
    ) -> None:
        safe = to_checksum_address(safe_address)
        self.client.post(
            f"/api/v1/safes/{safe}/multisig-transactions/",
            {
                "safe": safe,
                "to": to_checksum_address(safe_tx.to),
                "value": str(safe_tx.value),
                "data": safe_tx.data,
                "operation": safe_tx.operation,
                "safeTxGas": str(safe_tx.safe_tx_gas),
                "baseGas": str(safe_tx.base_gas),
                "gasPrice": str(safe_tx.gas_price),
                "gasToken": safe_tx.gas_token,
                "refundReceiver": safe_tx.refund_receiver,
                "nonce": safe_tx.nonce,
                "contractTransactionHash": safe_tx_hash,
                "sender": to_checksum_address(sender),
                "signature": signature,
                "origin": ORIGIN,
            },
        )


__all__ = ["SafeTransactionService"]
