"""Local signing credential backed by :mod:`eth_account`.

Orders are signed with EIP-712 against the settlement contract's domain
(``Gnosis Protocol`` / ``v2``). Safe transactions are hashed and signed with
the Safe v1.3 domain, which only carries ``chainId`` and the Safe address.
"""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak, to_bytes, to_checksum_address

from cowsell.contracts import to_hex
from cowsell.errors import ConfigurationError
from cowsell.models import RawOrder, SafeTransaction

from .base import Signer

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"

ORDER_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Order": [
        {"name": "sellToken", "type": "address"},
        {"name": "buyToken", "type": "address"},
        {"name": "receiver", "type": "address"},
        {"name": "sellAmount", "type": "uint256"},
        {"name": "buyAmount", "type": "uint256"},
        {"name": "validTo", "type": "uint32"},
        {"name": "appData", "type": "bytes32"},
        {"name": "feeAmount", "type": "uint256"},
        {"name": "kind", "type": "string"},
        {"name": "partiallyFillable", "type": "bool"},
        {"name": "sellTokenBalance", "type": "string"},
        {"name": "buyTokenBalance", "type": "string"},
    ],
}

SAFE_TX_TYPES = {
    "EIP712Domain": [
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "SafeTx": [
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "data", "type": "bytes"},
        {"name": "operation", "type": "uint8"},
        {"name": "safeTxGas", "type": "uint256"},
        {"name": "baseGas", "type": "uint256"},
        {"name": "gasPrice", "type": "uint256"},
        {"name": "gasToken", "type": "address"},
        {"name": "refundReceiver", "type": "address"},
        {"name": "nonce", "type": "uint256"},
    ],
}


def order_typed_data(order: RawOrder, chain_id: int, settlement: str) -> dict[str, Any]:
    """Return the EIP-712 payload for *order*."""

    return {
        "types": ORDER_TYPES,
        "primaryType": "Order",
        "domain": {
            "name": "Gnosis Protocol",
            "version": "v2",
            "chainId": chain_id,
            "verifyingContract": to_checksum_address(settlement),
        },
        "message": {
            "sellToken": to_checksum_address(order.sell_token),
            "buyToken": to_checksum_address(order.buy_token),
            "receiver": to_checksum_address(order.receiver),
            "sellAmount": order.sell_amount,
            "buyAmount": order.buy_amount,
            "validTo": order.valid_to,
            "appData": to_bytes(hexstr=order.app_data),
            "feeAmount": order.fee_amount,
            "kind": order.kind,
            "partiallyFillable": order.partially_fillable,
            "sellTokenBalance": order.sell_token_balance,
            "buyTokenBalance": order.buy_token_balance,
        },
    }


def safe_tx_typed_data(
    safe_tx: SafeTransaction, chain_id: int, safe_address: str
) -> dict[str, Any]:
    """Return the EIP-712 payload for *safe_tx* on *safe_address*."""

    return {
        "types": SAFE_TX_TYPES,
        "primaryType": "SafeTx",
        "domain": {
            "chainId": chain_id,
            "verifyingContract": to_checksum_address(safe_address),
        },
        "message": {
            "to": to_checksum_address(safe_tx.to),
            "value": safe_tx.value,
            "data": to_bytes(hexstr=safe_tx.data) if safe_tx.data not in ("", "0x") else b"",
            "operation": safe_tx.operation,
            "safeTxGas": safe_tx.safe_tx_gas,
            "baseGas": safe_tx.base_gas,
            "gasPrice": safe_tx.gas_price,
            "gasToken": to_checksum_address(safe_tx.gas_token),
            "refundReceiver": to_checksum_address(safe_tx.refund_receiver),
            "nonce": safe_tx.nonce,
        },
    }


def typed_data_hash(signable: SignableMessage) -> bytes:
    """Return the EIP-712 digest ``keccak(0x19 ++ version ++ domain ++ struct)``."""

    return keccak(b"\x19" + signable.version + signable.header + signable.body)


class LocalSigner(Signer):
    """Signer holding a private key in memory for the duration of a run."""

    def __init__(self, account: Any) -> None:
        self.account = account
        self.address = account.address

    @classmethod
    def from_mnemonic(
        cls, mnemonic: str | None, path: str = DEFAULT_DERIVATION_PATH
    ) -> "LocalSigner":
        """Derive the signer from a BIP-39 *mnemonic* (first account by default)."""

        if not mnemonic:
            raise ConfigurationError(
                "MNEMONIC environment var is required for accountTypes "
                "EOA, SAFE_WITH_EOA_PRESIGN or SAFE_WITH_EOA_EIP1271"
            )
        Account.enable_unaudited_hdwallet_features()
        try:
            account = Account.from_mnemonic(mnemonic.strip(), account_path=path)
        except Exception as exc:
            raise ConfigurationError(f"Invalid MNEMONIC: {exc}") from None
        return cls(account)

    def sign_order(self, order: RawOrder, chain_id: int, settlement: str) -> str:
        signable = encode_typed_data(full_message=order_typed_data(order, chain_id, settlement))
        return to_hex(self.account.sign_message(signable).signature)

    def safe_transaction_hash(
        self, safe_tx: SafeTransaction, chain_id: int, safe_address: str
    ) -> str:
        signable = encode_typed_data(
            full_message=safe_tx_typed_data(safe_tx, chain_id, safe_address)
        )
        return to_hex(typed_data_hash(signable))

    def sign_safe_transaction(
        self, safe_tx: SafeTransaction, chain_id: int, safe_address: str
    ) -> str:
        signable = encode_typed_data(
            full_message=safe_tx_typed_data(safe_tx, chain_id, safe_address)
        )
        return to_hex(self.account.sign_message(signable).signature)


__all__ = [
    "LocalSigner",
    "ORDER_TYPES",
    "SAFE_TX_TYPES",
    "order_typed_data",
    "safe_tx_typed_data",
    "typed_data_hash",
]
