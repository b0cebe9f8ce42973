"""Shared data models for order submission.

Amounts are carried as Python ``int`` from the moment they are parsed so that
values beyond the 53-bit float range never lose precision. Wire dictionaries
(``to_api``) render them back into decimal strings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Union

from .errors import ConfigurationError


class AccountType(str, Enum):
    """Supported account models."""

    EOA = "EOA"
    SAFE_WITH_EOA_PRESIGN = "SAFE_WITH_EOA_PRESIGN"
    SAFE_WITH_EOA_EIP1271 = "SAFE_WITH_EOA_EIP1271"


@dataclass(frozen=True)
class EoaAccount:
    """A single key both owns the funds and signs the order."""

    account_type: Literal[AccountType.EOA] = AccountType.EOA


@dataclass(frozen=True)
class SafePresignAccount:
    """Safe trading account authorising orders through ``setPreSignature``."""

    safe_address: str
    account_type: Literal[AccountType.SAFE_WITH_EOA_PRESIGN] = (
        AccountType.SAFE_WITH_EOA_PRESIGN
    )


@dataclass(frozen=True)
class SafeEip1271Account:
    """Safe trading account intended to sign off-chain via EIP-1271."""

    safe_address: str
    account_type: Literal[AccountType.SAFE_WITH_EOA_EIP1271] = (
        AccountType.SAFE_WITH_EOA_EIP1271
    )


Account = Union[EoaAccount, SafePresignAccount, SafeEip1271Account]


def parse_account(data: Any) -> Account:
    """Return the account variant described by the ``account`` JSON object."""

    if not isinstance(data, dict):
        raise ConfigurationError("account must be an object with an accountType")
    raw_type = data.get("accountType")
    try:
        account_type = AccountType(raw_type)
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise ConfigurationError(
            f"Unsupported account type {raw_type!r}. Supported: {allowed}",
            details={"accountType": raw_type},
        ) from None

    if account_type is AccountType.EOA:
        return EoaAccount()

    safe_address = data.get("safeAddress")
    if not safe_address:
        raise ConfigurationError(
            f"The safeAddress is a required parameter for account type: {account_type.value}"
        )
    if account_type is AccountType.SAFE_WITH_EOA_PRESIGN:
        return SafePresignAccount(safe_address=str(safe_address))
    return SafeEip1271Account(safe_address=str(safe_address))


def parse_uint(value: Any, name: str) -> int:
    """Parse an unsigned integer given as a decimal string or JSON integer."""

    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an unsigned integer, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isdecimal():
        number = int(value.strip())
    else:
        raise ConfigurationError(f"{name} must be an unsigned integer, got {value!r}")
    if number < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value!r}")
    return number


@dataclass(frozen=True)
class LimitOrderParams:
    """The ``order`` section of an order definition."""

    sell_token: str
    buy_token: str
    sell_amount_before_fee: int
    buy_amount: int | None = None
    partially_fillable: bool | None = None
    app_data: str | None = None
    receiver: str | None = None
    slippage_tolerance_bips: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "LimitOrderParams":
        if not isinstance(data, dict):
            raise ConfigurationError("order must be an object")
        for required in ("sellToken", "buyToken", "sellAmountBeforeFee"):
            if not data.get(required):
                raise ConfigurationError(f"order.{required} is required")

        buy_amount = data.get("buyAmount")
        bips = data.get("slippageToleranceBips")
        if bips is not None:
            bips = parse_uint(bips, "slippageToleranceBips")
            if bips >= 10_000:
                raise ConfigurationError(
                    f"slippageToleranceBips must be below 10000, got {bips}"
                )
        partially_fillable = data.get("partiallyFillable")
        if partially_fillable is not None and not isinstance(partially_fillable, bool):
            raise ConfigurationError("partiallyFillable must be true or false")

        return cls(
            sell_token=str(data["sellToken"]),
            buy_token=str(data["buyToken"]),
            sell_amount_before_fee=parse_uint(
                data["sellAmountBeforeFee"], "sellAmountBeforeFee"
            ),
            buy_amount=None if buy_amount is None else parse_uint(buy_amount, "buyAmount"),
            partially_fillable=partially_fillable,
            app_data=data.get("appData") or None,
            receiver=data.get("receiver") or None,
            slippage_tolerance_bips=bips,
        )


@dataclass(frozen=True)
class OrderDefinition:
    """Immutable order description loaded once per run."""

    account: Account
    order: LimitOrderParams
    chain_id: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "OrderDefinition":
        if not isinstance(data, dict):
            raise ConfigurationError("Order definition must be a JSON object")
        chain_id = data.get("chainId")
        if chain_id is not None:
            chain_id = parse_uint(chain_id, "chainId")
        return cls(
            account=parse_account(data.get("account")),
            order=LimitOrderParams.from_dict(data.get("order")),
            chain_id=chain_id,
        )


def load_order_definition(path: str | Path) -> OrderDefinition:
    """Read and validate the order definition JSON file at *path*."""

    try:
        content = Path(path).read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read order file {path}: {exc}") from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Order file {path} is not valid JSON: {exc}") from exc
    return OrderDefinition.from_dict(data)


@dataclass(frozen=True)
class QuoteQuery:
    """Request sent to the quote endpoint."""

    sell_token: str
    buy_token: str
    sell_amount_before_fee: int
    from_account: str
    receiver: str
    valid_to: int
    app_data: str
    partially_fillable: bool = False
    kind: str = "sell"
    sell_token_balance: str = "erc20"
    buy_token_balance: str = "erc20"

    def to_api(self) -> dict[str, Any]:
        return {
            "partiallyFillable": self.partially_fillable,
            "kind": self.kind,
            "sellTokenBalance": self.sell_token_balance,
            "buyTokenBalance": self.buy_token_balance,
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "sellAmountBeforeFee": str(self.sell_amount_before_fee),
            "from": self.from_account,
            "receiver": self.receiver,
            "validTo": self.valid_to,
            "appData": self.app_data,
        }


@dataclass(frozen=True)
class QuoteResult:
    """Price and fee returned by the quote endpoint."""

    sell_amount: int
    buy_amount: int
    fee_amount: int
    quote_id: int | None = None
    expiration: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "QuoteResult":
        quote = payload.get("quote", payload)
        return cls(
            sell_amount=int(quote["sellAmount"]),
            buy_amount=int(quote["buyAmount"]),
            fee_amount=int(quote["feeAmount"]),
            quote_id=payload.get("id"),
            expiration=payload.get("expiration"),
        )


@dataclass(frozen=True)
class RawOrder:
    """Order ready to be signed or pre-signed.

    Carries exactly the order schema fields; the quoting-only
    ``sellAmountBeforeFee`` has no place here.
    """

    sell_token: str
    buy_token: str
    receiver: str
    sell_amount: int
    buy_amount: int
    valid_to: int
    app_data: str
    fee_amount: int
    from_account: str
    partially_fillable: bool = False
    kind: str = "sell"
    sell_token_balance: str = "erc20"
    buy_token_balance: str = "erc20"
    price_quality: str = "optimal"

    def to_api(self) -> dict[str, Any]:
        return {
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "receiver": self.receiver,
            "sellAmount": str(self.sell_amount),
            "buyAmount": str(self.buy_amount),
            "validTo": self.valid_to,
            "appData": self.app_data,
            "feeAmount": str(self.fee_amount),
            "kind": self.kind,
            "partiallyFillable": self.partially_fillable,
            "sellTokenBalance": self.sell_token_balance,
            "buyTokenBalance": self.buy_token_balance,
            "from": self.from_account,
            "priceQuality": self.price_quality,
        }


@dataclass(frozen=True)
class TxRequest:
    """Call to be executed on-chain."""

    to: str
    data: str
    value: int = 0


@dataclass(frozen=True)
class OnchainOperation:
    """A described on-chain call; sequences of these keep plan order."""

    description: str
    tx_request: TxRequest


@dataclass(frozen=True)
class SafeInfo:
    """Safe metadata tracked by the transaction service."""

    address: str
    nonce: int
    threshold: int
    owners: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "SafeInfo":
        return cls(
            address=payload["address"],
            nonce=int(payload["nonce"]),
            threshold=int(payload["threshold"]),
            owners=tuple(payload.get("owners") or ()),
        )


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class SafeTransaction:
    """Safe transaction as hashed by ``getTransactionHash`` (no refunds)."""

    to: str
    value: int
    data: str
    operation: int
    nonce: int
    safe_tx_gas: int = 0
    base_gas: int = 0
    gas_price: int = 0
    gas_token: str = ZERO_ADDRESS
    refund_receiver: str = ZERO_ADDRESS


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a completed run."""

    order_id: str
    owner: str
    chain_id: int
    safe_tx_hash: str | None = None
    executed_tx_hash: str | None = None
    # Owner signatures still missing on a proposed Safe transaction
    pending_signatures: int = 0


__all__ = [
    "Account",
    "AccountType",
    "EoaAccount",
    "LimitOrderParams",
    "OnchainOperation",
    "OrderDefinition",
    "QuoteQuery",
    "QuoteResult",
    "RawOrder",
    "SafeEip1271Account",
    "SafeInfo",
    "SafePresignAccount",
    "SafeTransaction",
    "SubmissionResult",
    "TxRequest",
    "ZERO_ADDRESS",
    "load_order_definition",
    "parse_account",
    "parse_uint",
]
