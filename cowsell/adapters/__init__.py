"""Collaborator interfaces and their network-backed implementations."""

from .base import (
    ChainAdapter,
    OrderBookAdapter,
    SafeServiceAdapter,
    Signer,
    SigningScheme,
)
from .chain import Web3Chain, connect
from .orderbook import CowOrderBook
from .safe_service import SafeTransactionService
from .signing import LocalSigner

__all__ = [
    "ChainAdapter",
    "CowOrderBook",
    "LocalSigner",
    "OrderBookAdapter",
    "SafeServiceAdapter",
    "SafeTransactionService",
    "Signer",
    "SigningScheme",
    "Web3Chain",
    "connect",
]
