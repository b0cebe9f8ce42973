"""Abstract interfaces for the remote collaborators of an order run."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from cowsell.models import (
    QuoteQuery,
    QuoteResult,
    RawOrder,
    SafeInfo,
    SafeTransaction,
    TxRequest,
)

SigningScheme = Literal["eip712", "ethsign", "presign", "eip1271"]


class OrderBookAdapter(ABC):
    """Quote and order endpoints of the protocol's order book."""

    @abstractmethod
    def get_quote(self, query: QuoteQuery) -> QuoteResult:
        """Return price and fee for *query*."""

    @abstractmethod
    def send_order(
        self,
        order: RawOrder,
        *,
        signature: str,
        signing_scheme: SigningScheme,
        owner: str,
        quote_id: int | None = None,
    ) -> str:
        """Submit *order* and return its order UID."""


class SafeServiceAdapter(ABC):
    """Safe transaction service used to coordinate owner signatures."""

    @abstractmethod
    def get_safe_info(self, safe_address: str) -> SafeInfo:
        """Return owners, threshold and nonce of *safe_address*."""

    @abstractmethod
    def propose_transaction(
        self,
        safe_address: str,
        safe_tx: SafeTransaction,
        *,
        safe_tx_hash: str,
        sender: str,
        signature: str,
    ) -> None:
        """Queue *safe_tx* with the sender's signature."""


class ChainAdapter(ABC):
    """Blockchain reads and transaction submission."""

    @abstractmethod
    def token_balance(self, token: str, owner: str) -> int:
        """Return the ERC20 balance of *owner*."""

    @abstractmethod
    def token_allowance(self, token: str, owner: str, spender: str) -> int:
        """Return the ERC20 allowance *owner* granted to *spender*."""

    @abstractmethod
    def send_transaction(self, tx: TxRequest) -> str:
        """Sign and broadcast *tx*; return the transaction hash."""

    @abstractmethod
    def wait_for_transaction(self, tx_hash: str, confirmations: int = 1) -> None:
        """Block until *tx_hash* is mined and has *confirmations* blocks."""

    @abstractmethod
    def execute_safe_transaction(
        self, safe_address: str, safe_tx: SafeTransaction, signatures: str
    ) -> str:
        """Call ``execTransaction`` on *safe_address*; return the transaction hash."""


class Signer(ABC):
    """Holder of the signing credential."""

    address: str

    @abstractmethod
    def sign_order(self, order: RawOrder, chain_id: int, settlement: str) -> str:
        """Return the EIP-712 order signature as ``0x`` hex."""

    @abstractmethod
    def safe_transaction_hash(
        self, safe_tx: SafeTransaction, chain_id: int, safe_address: str
    ) -> str:
        """Return the EIP-712 ``safeTxHash`` for *safe_tx*."""

    @abstractmethod
    def sign_safe_transaction(
        self, safe_tx: SafeTransaction, chain_id: int, safe_address: str
    ) -> str:
        """Return the owner's EIP-712 signature over *safe_tx*."""


__all__ = [
    "ChainAdapter",
    "OrderBookAdapter",
    "SafeServiceAdapter",
    "Signer",
    "SigningScheme",
]
