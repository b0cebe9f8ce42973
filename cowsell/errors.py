"""Error taxonomy for the order submission workflow."""

from __future__ import annotations

from typing import Any


class CowsellError(Exception):
    """Base exception carrying a stable error code and structured details."""

    retryable = False

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CowsellError):
    """Missing credential, unsupported chain or malformed order definition."""

    def __init__(self, message: str = "Configuration error", details: dict[str, Any] | None = None):
        super().__init__(message, "CONFIG_ERROR", details)


class InsufficientBalanceError(CowsellError):
    """The trading account cannot fund the order."""

    def __init__(self, token: str, required: int, balance: int) -> None:
        super().__init__(
            f"User doesn't have enough balance for token {token}. "
            f"Required {required}, balance {balance}",
            "INSUFFICIENT_BALANCE",
            {"token": token, "required": required, "balance": balance},
        )
        self.required = required
        self.balance = balance


class UserDeclined(CowsellError):
    """The user answered ``n`` at a confirmation prompt."""

    def __init__(self, message: str = "Understood! Have a nice day") -> None:
        super().__init__(message, "USER_DECLINED")


class UnimplementedSigningPathError(CowsellError, NotImplementedError):
    """Authorization path that is referenced but not available yet."""

    def __init__(self, message: str = "Not implemented EIP-1271") -> None:
        super().__init__(message, "NOT_IMPLEMENTED")


class CollaboratorError(CowsellError):
    """A remote service or the chain rejected a request."""


class OrderBookError(CollaboratorError):
    """The order book rejected a quote or order request."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "ORDER_BOOK_ERROR", details)


class SafeServiceError(CollaboratorError):
    """The Safe transaction service rejected a request."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "SAFE_SERVICE_ERROR", details)


class TransactionRevertedError(CollaboratorError):
    """A mined transaction reported a failed status."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(
            f"Transaction {tx_hash} reverted", "TX_REVERTED", {"tx_hash": tx_hash}
        )


class StuckTransactionError(CollaboratorError):
    """A transaction was not mined or confirmed within the wait timeout."""

    retryable = True

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(
            f"Transaction {tx_hash} not confirmed after {timeout:.0f}s; "
            "it may still be mined, check the explorer and retry",
            "TX_STUCK",
            {"tx_hash": tx_hash, "timeout": timeout},
        )


__all__ = [
    "CollaboratorError",
    "ConfigurationError",
    "CowsellError",
    "InsufficientBalanceError",
    "OrderBookError",
    "SafeServiceError",
    "StuckTransactionError",
    "TransactionRevertedError",
    "UnimplementedSigningPathError",
    "UserDeclined",
]
