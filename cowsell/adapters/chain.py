"""Web3-backed chain access: ERC20 reads, transaction submission and waits."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from eth_utils import to_checksum_address
from web3.exceptions import TimeExhausted

from cowsell.contracts import ERC20_ABI, encode_exec_transaction, to_hex
from cowsell.errors import StuckTransactionError, TransactionRevertedError
from cowsell.models import SafeTransaction, TxRequest

from .base import ChainAdapter

log = logging.getLogger("cowsell")


def connect(rpc_url: str) -> Any:
    """Return a :class:`web3.Web3` client for *rpc_url*."""

    from web3 import Web3

    return Web3(Web3.HTTPProvider(rpc_url))


class Web3Chain(ChainAdapter):
    """Chain adapter signing transactions with a local account.

    ``account`` may be ``None`` for read-only use (dry runs); sending then
    fails with ``RuntimeError``.
    """

    def __init__(
        self,
        w3: Any,
        account: Any | None = None,
        *,
        tx_wait_timeout: float = 600.0,
        max_gas_price_gwei: int | None = None,
        poll_interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.w3 = w3
        self.account = account
        self.tx_wait_timeout = tx_wait_timeout
        self.max_gas_price_gwei = max_gas_price_gwei
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def _token(self, token: str) -> Any:
        return self.w3.eth.contract(address=to_checksum_address(token), abi=ERC20_ABI)

    def token_balance(self, token: str, owner: str) -> int:
        return int(self._token(token).functions.balanceOf(to_checksum_address(owner)).call())

    def token_allowance(self, token: str, owner: str, spender: str) -> int:
        return int(
            self._token(token)
            .functions.allowance(to_checksum_address(owner), to_checksum_address(spender))
            .call()
        )

    def send_transaction(self, tx: TxRequest) -> str:
        if self.account is None:
            raise RuntimeError("No signing account configured for sending transactions")

        gas_price = self.w3.eth.gas_price
        if (
            self.max_gas_price_gwei is not None
            and gas_price > self.max_gas_price_gwei * 10**9
        ):
            raise RuntimeError("Gas price exceeds configured maximum")

        sender = self.account.address
        call = {
            "from": sender,
            "to": to_checksum_address(tx.to),
            "value": int(tx.value),
            "data": tx.data,
        }
        params = {
            **call,
            "nonce": self.w3.eth.get_transaction_count(sender),
            "gasPrice": gas_price,
            "chainId": self.w3.eth.chain_id,
            "gas": self.w3.eth.estimate_gas(call),
        }
        signed = self.account.sign_transaction(params)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return to_hex(tx_hash)

    def wait_for_transaction(self, tx_hash: str, confirmations: int = 1) -> None:
        """Wait for *tx_hash* to be mined and buried under *confirmations* blocks.

        Raises:
            StuckTransactionError: If the wait exceeds ``tx_wait_timeout``.
            TransactionRevertedError: If the receipt reports failure.
        """

        deadline = self._clock() + self.tx_wait_timeout
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.tx_wait_timeout, poll_latency=self.poll_interval
            )
        except TimeExhausted:
            raise StuckTransactionError(tx_hash, self.tx_wait_timeout) from None

        if int(receipt["status"]) == 0:
            raise TransactionRevertedError(tx_hash)

        target = int(receipt["blockNumber"]) + max(int(confirmations), 1) - 1
        while int(self.w3.eth.block_number) < target:
            if self._clock() >= deadline:
                raise StuckTransactionError(tx_hash, self.tx_wait_timeout)
            self._sleep(self.poll_interval)

    def execute_safe_transaction(
        self, safe_address: str, safe_tx: SafeTransaction, signatures: str
    ) -> str:
        data = encode_exec_transaction(
            to=safe_tx.to,
            value=safe_tx.value,
            data=safe_tx.data,
            operation=safe_tx.operation,
            safe_tx_gas=safe_tx.safe_tx_gas,
            base_gas=safe_tx.base_gas,
            gas_price=safe_tx.gas_price,
            gas_token=safe_tx.gas_token,
            refund_receiver=safe_tx.refund_receiver,
            signatures=signatures,
        )
        return self.send_transaction(TxRequest(to=safe_address, value=0, data=data))


__all__ = ["Web3Chain", "connect"]
