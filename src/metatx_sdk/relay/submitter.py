"""Relay Submitter.

Submits a signed meta-transaction to the contract from the relayer's own
account and tracks it from submission to confirmation:

    Pending -> Submitted(hash) -> Confirmed(receipt)
    Pending -> Failed(reason)
    Submitted(hash) -> Failed(reason)     (reverted receipt)

Failures are never retried. A stale nonce or signature must be rebuilt from
scratch, not resubmitted.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from eth_utils import to_checksum_address, to_hex
from web3.exceptions import TransactionNotFound

from ..errors import (
    GasEstimationFailed,
    MetaTxError,
    SubmissionReverted,
    classify_rejection,
)
from ..meta_tx import SignatureComponents
from ..meta_tx.utils import hex_to_bytes
from .session import ClientSession
from .state import QuoteState

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class RelaySubmission:
    """Lifecycle record for one submit attempt."""

    from_address: str
    function_signature: str
    state: SubmissionState = SubmissionState.PENDING
    tx_hash: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    error: Optional[MetaTxError] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (SubmissionState.CONFIRMED, SubmissionState.FAILED)


@dataclass(frozen=True)
class RelayEvent:
    """Lifecycle transition reported to the caller."""

    state: SubmissionState
    submission: RelaySubmission
    quote_state: Optional[QuoteState] = None
    """Contract state re-read after confirmation, when available."""

    refresh_error: Optional[Exception] = None
    """Error raised while re-reading state after confirmation."""


def rejection_reason(error: Exception) -> str:
    """Raw provider message for an error, without reinterpretation."""
    if error.args and isinstance(error.args[0], dict) and "message" in error.args[0]:
        return str(error.args[0]["message"])
    return str(error)


class RelaySubmitter:
    """Relays meta-transactions, paying gas from the session's relayer account."""

    def __init__(
        self,
        session: ClientSession,
        state_refresher: Optional[Callable[[], Awaitable[QuoteState]]] = None,
    ):
        self._session = session
        self._state_refresher = state_refresher

    async def submit(
        self,
        from_address: str,
        function_signature: str,
        components: SignatureComponents,
    ) -> AsyncIterator[RelayEvent]:
        """Submit a meta-transaction and yield its lifecycle events.

        Yields at most two events: ``SUBMITTED`` then ``CONFIRMED`` or
        ``FAILED``, or a single ``FAILED`` if submission never happened.
        Each event carries a snapshot of the submission at that point.

        Gas is estimated with ``from`` set to the relayer, which sends and
        pays for the transaction; the user is only the first call argument.
        Only a contract rejection during estimation is classified as
        ``NonceMismatch``. Broadcast errors concern the relayer's own
        account (e.g. "nonce too low") and are reported as
        ``SubmissionReverted``.

        Args:
            from_address: User who signed the message
            function_signature: ABI-encoded call the user signed
            components: Decoded signature of the user
        """
        session = self._session
        eth = session.web3.eth
        relayer = session.relayer_address
        submission = RelaySubmission(
            from_address=to_checksum_address(from_address),
            function_signature=function_signature,
        )

        call = session.contract.functions.executeMetaTransaction(
            submission.from_address,
            hex_to_bytes(function_signature),
            hex_to_bytes(components.r),
            hex_to_bytes(components.s),
            components.v,
        )

        try:
            estimate = await call.estimate_gas({"from": relayer})
        except Exception as e:
            reason = rejection_reason(e)
            yield self._fail(submission, classify_rejection(reason, GasEstimationFailed))
            return

        submission.gas_limit = int(estimate * session.config.gas_limit_multiplier)

        try:
            submission.gas_price = await eth.gas_price
            logger.debug(
                "Gas quote: limit=%s price=%s", submission.gas_limit, submission.gas_price
            )
            tx_nonce = await eth.get_transaction_count(relayer, "pending")
            tx = await call.build_transaction(
                {
                    "from": relayer,
                    "gas": submission.gas_limit,
                    "gasPrice": submission.gas_price,
                    "nonce": tx_nonce,
                    "chainId": session.chain_id,
                }
            )
            signed_tx = session.relayer.sign_transaction(tx)
            tx_hash = await eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            reason = rejection_reason(e)
            yield self._fail(submission, SubmissionReverted(reason))
            return

        submission.tx_hash = to_hex(tx_hash)
        submission.state = SubmissionState.SUBMITTED
        logger.info("Transaction sent by relayer with hash %s", submission.tx_hash)
        yield RelayEvent(
            state=SubmissionState.SUBMITTED, submission=replace(submission)
        )

        try:
            receipt = await self._wait_for_receipt(submission.tx_hash)
        except Exception as e:
            yield self._fail(submission, SubmissionReverted(rejection_reason(e)))
            return

        submission.receipt = dict(receipt)
        if receipt.get("status") != 1:
            yield self._fail(
                submission,
                SubmissionReverted(f"Transaction {submission.tx_hash} reverted"),
            )
            return

        submission.state = SubmissionState.CONFIRMED
        logger.info("Transaction %s confirmed on chain", submission.tx_hash)
        yield await self._confirmed_event(submission)

    async def submit_and_wait(
        self,
        from_address: str,
        function_signature: str,
        components: SignatureComponents,
    ) -> RelaySubmission:
        """Submit and return the terminal submission record."""
        submission = None
        async for event in self.submit(from_address, function_signature, components):
            submission = event.submission
        return submission

    async def _wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        # No upper bound; callers cancel the task to give up.
        eth = self._session.web3.eth
        while True:
            try:
                receipt = await eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                receipt = None
            if receipt is not None:
                return receipt
            await asyncio.sleep(self._session.config.receipt_poll_interval)

    async def _confirmed_event(self, submission: RelaySubmission) -> RelayEvent:
        snapshot = replace(submission)
        if self._state_refresher is None:
            return RelayEvent(state=SubmissionState.CONFIRMED, submission=snapshot)

        try:
            quote_state = await self._state_refresher()
        except Exception as e:
            logger.warning("State refresh after %s failed: %s", submission.tx_hash, e)
            return RelayEvent(
                state=SubmissionState.CONFIRMED, submission=snapshot, refresh_error=e
            )
        return RelayEvent(
            state=SubmissionState.CONFIRMED,
            submission=snapshot,
            quote_state=quote_state,
        )

    @staticmethod
    def _fail(submission: RelaySubmission, error: MetaTxError) -> RelayEvent:
        submission.state = SubmissionState.FAILED
        submission.error = error
        submission.reason = error.reason
        logger.warning(
            "Relay of meta-transaction from %s failed: %s",
            submission.from_address,
            submission.reason,
        )
        return RelayEvent(state=SubmissionState.FAILED, submission=replace(submission))
