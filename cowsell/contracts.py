"""Contract ABIs and calldata encoders.

Minimal ABIs for the functions we invoke.  Keeping these inline avoids the
need to distribute separate JSON artefacts.  Calldata is encoded with
:mod:`eth_abi` so that building an operation never touches the network.
"""

from __future__ import annotations

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_bytes, to_checksum_address

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_owner", "type": "address"}],
        "outputs": [{"name": "balance", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "outputs": [{"name": "remaining", "type": "uint256"}],
    },
]

APPROVE_SIGNATURE = "approve(address,uint256)"
SET_PRE_SIGNATURE_SIGNATURE = "setPreSignature(bytes,bool)"
MULTISEND_SIGNATURE = "multiSend(bytes)"
EXEC_TRANSACTION_SIGNATURE = (
    "execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,"
    "address,address,bytes)"
)

# Safe operation kinds
CALL = 0
DELEGATE_CALL = 1


def to_hex(data: bytes) -> str:
    """Return ``0x``-prefixed lowercase hex for *data*."""

    return "0x" + bytes(data).hex()


def _calldata(signature: str, types: list[str], args: list) -> str:
    selector = function_signature_to_4byte_selector(signature)
    return to_hex(selector + encode(types, args))


def encode_approve(spender: str, amount: int) -> str:
    """Return calldata for ``approve(spender, amount)``."""

    return _calldata(
        APPROVE_SIGNATURE, ["address", "uint256"], [to_checksum_address(spender), amount]
    )


def encode_set_pre_signature(order_uid: str, signed: bool = True) -> str:
    """Return calldata for ``setPreSignature(orderUid, signed)`` on the settlement."""

    return _calldata(
        SET_PRE_SIGNATURE_SIGNATURE, ["bytes", "bool"], [to_bytes(hexstr=order_uid), signed]
    )


def pack_multisend(calls: list[tuple[int, str, int, str]]) -> bytes:
    """Pack ``(operation, to, value, data)`` tuples in the MultiSend layout.

    Each entry is ``uint8 operation ++ address to ++ uint256 value ++
    uint256 len(data) ++ data`` with no padding between entries; entries keep
    their order.
    """

    packed = b""
    for operation, to, value, data in calls:
        payload = to_bytes(hexstr=data) if data and data != "0x" else b""
        packed += (
            operation.to_bytes(1, "big")
            + to_bytes(hexstr=to_checksum_address(to))
            + int(value).to_bytes(32, "big")
            + len(payload).to_bytes(32, "big")
            + payload
        )
    return packed


def encode_multisend(calls: list[tuple[int, str, int, str]]) -> str:
    """Return calldata for ``multiSend(bytes)`` bundling *calls*."""

    return _calldata(MULTISEND_SIGNATURE, ["bytes"], [pack_multisend(calls)])


def encode_exec_transaction(
    *,
    to: str,
    value: int,
    data: str,
    operation: int,
    safe_tx_gas: int,
    base_gas: int,
    gas_price: int,
    gas_token: str,
    refund_receiver: str,
    signatures: str,
) -> str:
    """Return calldata for the Safe ``execTransaction`` entry point."""

    return _calldata(
        EXEC_TRANSACTION_SIGNATURE,
        [
            "address",
            "uint256",
            "bytes",
            "uint8",
            "uint256",
            "uint256",
            "uint256",
            "address",
            "address",
            "bytes",
        ],
        [
            to_checksum_address(to),
            value,
            to_bytes(hexstr=data) if data and data != "0x" else b"",
            operation,
            safe_tx_gas,
            base_gas,
            gas_price,
            to_checksum_address(gas_token),
            to_checksum_address(refund_receiver),
            to_bytes(hexstr=signatures),
        ],
    )


__all__ = [
    "CALL",
    "DELEGATE_CALL",
    "ERC20_ABI",
    "encode_approve",
    "encode_exec_transaction",
    "encode_multisend",
    "encode_set_pre_signature",
    "pack_multisend",
    "to_hex",
]
