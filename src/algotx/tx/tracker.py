"""
Pending Transaction Tracker - follows a submitted transaction to settlement.

Polls the node's pending-transaction endpoint until the transaction is
Confirmed, Evicted or Unknown. A transaction that is still pooled once
the network has moved past its last valid round can no longer be
confirmed by this node's view; that is reported as Unknown, never as
Evicted.
"""

import asyncio
from typing import Optional

import structlog

from algotx.config import AlgoTxConfig, get_config
from algotx.core.pending import TrackingResult, TxnState, interpret_status
from algotx.exceptions import PollError
from algotx.node.interface import NodeInterface

logger = structlog.get_logger(__name__)


class PendingTransactionTracker:
    """
    Polls transaction status with exponential backoff.

    Trackers keep no per-transaction state, so one instance can wait on
    several transaction ids concurrently.
    """

    def __init__(
        self,
        node: NodeInterface,
        config: Optional[AlgoTxConfig] = None,
    ):
        """
        Initialize the tracker.

        Args:
            node: Node interface used for status polls
            config: Configuration supplying poll interval and backoff
        """
        self.node = node
        self.config = config or get_config()

    async def poll_once(self, txid: str) -> TrackingResult:
        """
        Fetch and interpret one status snapshot.

        Raises:
            PollError: On transient node failures
        """
        status = await self.node.pending_transaction_info(txid)
        return interpret_status(txid, status)

    async def wait(
        self,
        txid: str,
        last_valid_round: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ) -> TrackingResult:
        """
        Wait until the transaction reaches a terminal state.

        Args:
            txid: Transaction id returned on submission
            last_valid_round: Stop once the network passes this round
            timeout_seconds: Wall-clock limit; defaults to the configured one

        Returns:
            The terminal result, or the last non-terminal one on timeout
        """
        if timeout_seconds is None:
            timeout_seconds = self.config.poll_timeout_seconds

        loop = asyncio.get_running_loop()
        started = loop.time()
        delay = self.config.poll_interval_seconds
        result = TrackingResult(txid=txid, state=TxnState.SUBMITTED)
        polls = 0

        while True:
            polls += 1
            try:
                result = await self.poll_once(txid)
            except PollError as e:
                logger.warning("status_poll_failed", txid=txid, attempt=polls, error=str(e))
            else:
                if result.state is TxnState.EVICTED and last_valid_round is not None:
                    # Past the deadline a pool error is reported as Unknown.
                    if await self._deadline_passed(txid, last_valid_round):
                        result = self._past_deadline(txid, result, last_valid_round)
                if result.is_terminal:
                    self._log_result(result, polls)
                    return result

            if last_valid_round is not None:
                expired = await self._deadline_passed(txid, last_valid_round)
                if expired:
                    return await self._final_check(txid, result, last_valid_round, polls)

            elapsed = loop.time() - started
            if timeout_seconds is not None and elapsed >= timeout_seconds:
                logger.warning(
                    "tx_wait_timeout",
                    txid=txid,
                    state=result.state.value,
                    elapsed_seconds=round(elapsed, 3),
                )
                return result

            sleep_for = delay
            if timeout_seconds is not None:
                sleep_for = min(delay, timeout_seconds - elapsed)
            await asyncio.sleep(sleep_for)
            delay = min(
                delay * self.config.poll_backoff_factor,
                self.config.poll_max_interval_seconds,
            )

    async def _deadline_passed(self, txid: str, last_valid_round: int) -> bool:
        try:
            current_round = await self.node.get_current_round()
        except PollError as e:
            logger.warning("round_poll_failed", txid=txid, error=str(e))
            return False
        return current_round > last_valid_round

    async def _final_check(
        self,
        txid: str,
        result: TrackingResult,
        last_valid_round: int,
        polls: int,
    ) -> TrackingResult:
        # The block for last_valid_round may have landed after the last poll.
        try:
            final = await self.poll_once(txid)
        except PollError as e:
            logger.warning("status_poll_failed", txid=txid, attempt=polls + 1, error=str(e))
        else:
            if final.state is TxnState.CONFIRMED:
                self._log_result(final, polls + 1)
                return final
            result = final

        unknown = self._past_deadline(txid, result, last_valid_round)
        self._log_result(unknown, polls + 1)
        return unknown

    @staticmethod
    def _past_deadline(
        txid: str,
        result: TrackingResult,
        last_valid_round: int,
    ) -> TrackingResult:
        return TrackingResult(
            txid=txid,
            state=TxnState.UNKNOWN,
            status=result.status,
            reason=f"network passed last valid round {last_valid_round} without confirmation",
        )

    def _log_result(self, result: TrackingResult, polls: int) -> None:
        if result.state is TxnState.CONFIRMED:
            logger.info(
                "tx_confirmed",
                txid=result.txid,
                confirmed_round=result.confirmed_round,
                polls=polls,
            )
        elif result.state is TxnState.EVICTED:
            logger.warning("tx_evicted", txid=result.txid, reason=result.reason, polls=polls)
        else:
            logger.warning("tx_unknown", txid=result.txid, reason=result.reason, polls=polls)
