"""Preparatory on-chain operations: token approval and order pre-signature."""

from __future__ import annotations

import logging

from cowsell.adapters.base import ChainAdapter
from cowsell.config import MAX_UINT256
from cowsell.contracts import encode_approve, encode_set_pre_signature
from cowsell.errors import InsufficientBalanceError
from cowsell.models import OnchainOperation, TxRequest

log = logging.getLogger(__name__)


def plan_approval(
    chain: ChainAdapter,
    *,
    from_account: str,
    sell_token: str,
    sell_amount: int,
    sell_amount_before_fee: int,
    spender: str,
) -> OnchainOperation | None:
    """Return the approval the order needs, or ``None`` when allowance suffices.

    The balance check runs first so an unfundable order fails before any
    allowance is read. When an approval is needed it grants the maximum
    ``uint256`` to *spender* so later orders skip this step.

    Raises:
        InsufficientBalanceError: If the balance is below ``sell_amount_before_fee``.
    """

    balance = chain.token_balance(sell_token, from_account)
    if balance < sell_amount_before_fee:
        raise InsufficientBalanceError(sell_token, sell_amount_before_fee, balance)

    allowance = chain.token_allowance(sell_token, from_account, spender)
    if allowance >= sell_amount:
        log.debug("allowance %d covers sell amount %d", allowance, sell_amount)
        return None

    log.info(
        "allowance %d below sell amount %d; approval required for %s",
        allowance,
        sell_amount,
        spender,
    )
    return OnchainOperation(
        description="Approve sell token",
        tx_request=TxRequest(
            to=sell_token, value=0, data=encode_approve(spender, MAX_UINT256)
        ),
    )


def presign_operation(order_uid: str, settlement: str) -> OnchainOperation:
    """Return the ``setPreSignature(orderUid, true)`` operation."""

    return OnchainOperation(
        description="Pre-sign order",
        tx_request=TxRequest(
            to=settlement, value=0, data=encode_set_pre_signature(order_uid, True)
        ),
    )


__all__ = ["plan_approval", "presign_operation"]
