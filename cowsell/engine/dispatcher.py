"""Order lifecycle orchestration and account-model dispatch.

``OrderFlow.run`` drives one order through quoting, price protection and
preparatory planning, then hands it to the authorization path of its account
model:

* ``EOA``: execute each preparatory transaction after confirmation, sign the
  order with EIP-712 and post it.
* ``SAFE_WITH_EOA_PRESIGN``: always the Safe coordinator.
* ``SAFE_WITH_EOA_EIP1271``: gasless submission is not available; when an
  on-chain step is needed anyway the order falls back to the pre-signature
  bundle, otherwise the run fails explicitly.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable

from cowsell.adapters.base import (
    ChainAdapter,
    OrderBookAdapter,
    SafeServiceAdapter,
    Signer,
)
from cowsell.config import DEFAULT_SLIPPAGE_BIPS, ZERO_APP_DATA
from cowsell.errors import ConfigurationError, UnimplementedSigningPathError
from cowsell.models import (
    Account,
    EoaAccount,
    OnchainOperation,
    OrderDefinition,
    RawOrder,
    SafeEip1271Account,
    SafePresignAccount,
    SubmissionResult,
)
from cowsell.networks import Network
from cowsell.prompt import ConfirmationGate
from cowsell.report import log_operations, pretty

from .approvals import plan_approval
from .pricing import protect_price
from .quote import build_quote_query, resolve_trading_accounts, to_raw_order
from .safe import SafeCoordinator

log = logging.getLogger(__name__)


class FlowState(str, Enum):
    QUOTING = "quoting"
    PLANNING_PREPARATION = "planning_preparation"
    AUTHORIZING = "authorizing"
    SUBMITTED = "submitted"
    FAILED = "failed"


def _now_ms() -> int:
    return int(time.time() * 1000)


class OrderFlow:
    """State machine submitting a single order.

    All collaborators are passed in explicitly so tests can script the
    console and fake the network.
    """

    def __init__(
        self,
        *,
        network: Network,
        order_book: OrderBookAdapter,
        chain: ChainAdapter,
        gate: ConfirmationGate,
        signer: Signer | None = None,
        safe_service: SafeServiceAdapter | None = None,
        app_data: str = ZERO_APP_DATA,
        default_slippage_bips: int = DEFAULT_SLIPPAGE_BIPS,
        confirmations: int = 1,
        now_ms: Callable[[], int] = _now_ms,
        dry_run: bool = False,
    ) -> None:
        self.network = network
        self.order_book = order_book
        self.chain = chain
        self.gate = gate
        self.signer = signer
        self.safe_service = safe_service
        self.app_data = app_data
        self.default_slippage_bips = default_slippage_bips
        self.confirmations = confirmations
        self.now_ms = now_ms
        self.dry_run = dry_run
        self.state = FlowState.QUOTING

    # ------------------------------------------------------------------
    def _transition(self, state: FlowState) -> None:
        log.debug("order flow: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, definition: OrderDefinition) -> SubmissionResult | None:
        """Submit the order in *definition*.

        Returns ``None`` in dry-run mode, after planning and before anything
        irreversible happens.
        """

        self._transition(FlowState.QUOTING)
        try:
            return self._run(definition)
        except BaseException:
            self._transition(FlowState.FAILED)
            raise

    def _run(self, definition: OrderDefinition) -> SubmissionResult | None:
        order = definition.order
        signing_account = self.signer.address if self.signer else None
        from_account, receiver = resolve_trading_accounts(
            definition.account, signing_account, order.receiver
        )

        query = build_quote_query(
            order,
            from_account=from_account,
            receiver=receiver,
            app_data=self.app_data,
            now_ms=self.now_ms(),
        )
        log.info("Get quote for order:\n%s", pretty(query.to_api()))
        quote = self.order_book.get_quote(query)
        log.info(
            "Quote response: Receive at least %d buy tokens. Fee = %d sell tokens.",
            quote.buy_amount,
            quote.fee_amount,
        )

        price = protect_price(quote, order, self.default_slippage_bips)
        raw_order = to_raw_order(
            query, quote, sell_amount=price.sell_amount, buy_amount=price.buy_amount
        )
        log.info("Raw order:\n%s", pretty(raw_order.to_api()))

        self._transition(FlowState.PLANNING_PREPARATION)
        # Accumulated to be executed one by one (EOA) or bundled (Safe).
        operations: list[OnchainOperation] = []
        approve = plan_approval(
            self.chain,
            from_account=from_account,
            sell_token=order.sell_token,
            sell_amount=price.sell_amount,
            sell_amount_before_fee=order.sell_amount_before_fee,
            spender=self.network.vault_relayer,
        )
        if approve is not None:
            operations.append(approve)

        if self.dry_run:
            log_operations(operations, "transactions would be needed before posting")
            log.info("[dry-run] stopping before any transaction, signature or order post")
            return None

        self._transition(FlowState.AUTHORIZING)
        result = self._authorize(definition.account, raw_order, operations, quote.quote_id)
        self._transition(FlowState.SUBMITTED)
        return result

    # ------------------------------------------------------------------
    def _authorize(
        self,
        account: Account,
        raw_order: RawOrder,
        operations: list[OnchainOperation],
        quote_id: int | None,
    ) -> SubmissionResult:
        if isinstance(account, EoaAccount):
            return self._submit_eoa(raw_order, operations, quote_id)
        if isinstance(account, SafePresignAccount):
            return self._coordinator().submit(raw_order, operations, quote_id=quote_id)
        if isinstance(account, SafeEip1271Account):
            if not operations:
                raise UnimplementedSigningPathError(
                    "Not implemented EIP-1271: gasless Safe orders are not supported yet"
                )
            log.warning(
                "You cannot trade gasless yet!: You try to trade using EIP-1271, but "
                "you need to do some pre-interaction which requires an ethereum "
                "transaction (approve sell token). Therefore we will create this "
                "order as a bundle transaction which uses pre-sign"
            )
            return self._coordinator().submit(raw_order, operations, quote_id=quote_id)
        raise ConfigurationError(f"Unsupported account type {account!r}")

    def _require_signer(self) -> Signer:
        if self.signer is None:
            raise ConfigurationError("MNEMONIC environment var is required to sign")
        return self.signer

    def _coordinator(self) -> SafeCoordinator:
        if self.safe_service is None:
            raise ConfigurationError("Safe transaction service is not configured")
        return SafeCoordinator(
            network=self.network,
            order_book=self.order_book,
            safe_service=self.safe_service,
            chain=self.chain,
            signer=self._require_signer(),
            gate=self.gate,
        )

    # ------------------------------------------------------------------
    def _submit_eoa(
        self,
        raw_order: RawOrder,
        operations: list[OnchainOperation],
        quote_id: int | None,
    ) -> SubmissionResult:
        signer = self._require_signer()
        self._execute_operations(operations)

        self.gate.require(
            "Are you sure you want to post this order?",
            "Understood! Not sending the order. Have a nice day",
        )
        signature = signer.sign_order(
            raw_order, self.network.chain_id, self.network.settlement
        )
        log.info(
            "Signed off-chain order using EIP-712. Signature: %s, Signing Scheme: eip712",
            signature,
        )
        order_id = self.order_book.send_order(
            raw_order,
            signature=signature,
            signing_scheme="eip712",
            owner=signer.address,
            quote_id=quote_id,
        )
        return SubmissionResult(
            order_id=order_id, owner=signer.address, chain_id=self.network.chain_id
        )

    def _execute_operations(self, operations: list[OnchainOperation]) -> None:
        """Send each operation in plan order, waiting for it to confirm."""

        total = len(operations)
        if not total:
            return
        log.info("%d transactions need to be executed before the order can be posted", total)
        for number, op in enumerate(operations, start=1):
            log.info(
                "    [%d/%d] Are you sure you want to %s?", number, total, op.description
            )
            log.info("          To: %s", op.tx_request.to)
            log.info("          Tx Data: %s", op.tx_request.data)
            self.gate.require(
                "    Approve transaction?",
                "Understood! Not sending the transaction. Have a nice day",
            )
            tx_hash = self.chain.send_transaction(op.tx_request)
            log.info(
                "    Sent transaction for %s. Review in block explorer: %s",
                op.description,
                self.network.tx_url(tx_hash),
            )
            self.chain.wait_for_transaction(tx_hash, 1)
            log.info(
                "    Transaction was mined! waiting for %d confirmations before continuing",
                self.confirmations,
            )
            self.chain.wait_for_transaction(tx_hash, self.confirmations)


__all__ = ["FlowState", "OrderFlow"]
