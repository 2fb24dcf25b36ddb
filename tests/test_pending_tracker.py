"""
Test suite for pending transaction tracking.

Tests status interpretation, the polling loop and the client that ties
signing, submission and tracking together.
"""

import asyncio

import msgpack
import pytest

from algotx.client import TransactionClient
from algotx.core.pending import (
    PendingTransactionStatus,
    TrackingResult,
    TxnState,
    interpret_status,
)
from algotx.exceptions import PollError, SigningError, SubmissionError
from algotx.tx.asset_config import AssetConfigTransactionBuilder
from algotx.tx.tracker import PendingTransactionTracker

from helpers import generate_test_txid


TXID = generate_test_txid(1)


def pooled() -> PendingTransactionStatus:
    return PendingTransactionStatus(txid=TXID)


def confirmed(round_number: int = 5000001, **kwargs) -> PendingTransactionStatus:
    return PendingTransactionStatus(txid=TXID, confirmed_round=round_number, **kwargs)


def evicted(reason: str = "overspend") -> PendingTransactionStatus:
    return PendingTransactionStatus(txid=TXID, pool_error=reason)


# ============================================================================
# Test Status Interpretation
# ============================================================================

class TestInterpretStatus:
    """Tests for mapping poll responses onto settlement states."""

    def test_pooled(self):
        result = interpret_status(TXID, pooled())

        assert result.state == TxnState.POOLED
        assert result.is_terminal is False
        assert result.confirmed_round is None

    def test_confirmed(self):
        result = interpret_status(TXID, confirmed(5000001))

        assert result.state == TxnState.CONFIRMED
        assert result.confirmed_round == 5000001
        assert result.is_terminal is True

    def test_evicted(self):
        result = interpret_status(TXID, evicted("overspend"))

        assert result.state == TxnState.EVICTED
        assert result.reason == "overspend"
        assert result.is_terminal is True

    def test_not_found(self):
        result = interpret_status(TXID, None)

        assert result.state == TxnState.UNKNOWN
        assert result.state != TxnState.EVICTED
        assert result.status is None

    def test_confirmed_wins_over_pool_error(self):
        status = PendingTransactionStatus(txid=TXID, confirmed_round=7, pool_error="late")
        assert interpret_status(TXID, status).state == TxnState.CONFIRMED

    def test_creation_index_only_when_confirmed(self):
        created = interpret_status(TXID, confirmed(asset_index=99))
        pending = TrackingResult(
            txid=TXID,
            state=TxnState.POOLED,
            status=PendingTransactionStatus(txid=TXID, asset_index=99),
        )

        assert created.asset_index == 99
        assert pending.asset_index is None

    def test_from_response(self):
        status = PendingTransactionStatus.from_response(
            TXID,
            {
                "confirmed-round": 12,
                "pool-error": "",
                "asset-index": 31566704,
                "sender-rewards": 5,
                "txn": {},
            },
        )

        assert status.confirmed_round == 12
        assert status.asset_index == 31566704
        assert status.sender_rewards == 5
        assert status.application_index is None
        assert status.closing_amount is None

    def test_from_response_defaults(self):
        status = PendingTransactionStatus.from_response(TXID, {"pool-error": "fee too small"})

        assert status.confirmed_round == 0
        assert status.pool_error == "fee too small"


# ============================================================================
# Test Polling Loop
# ============================================================================

class TestTrackerWait:
    """Tests for waiting on a transaction."""

    @pytest.mark.asyncio
    async def test_pooled_then_confirmed(self, mock_node, test_config):
        mock_node.statuses = [pooled(), pooled(), confirmed()]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID)

        assert result.state == TxnState.CONFIRMED
        assert result.confirmed_round == 5000001
        assert mock_node.poll_count == 3

    @pytest.mark.asyncio
    async def test_evicted(self, mock_node, test_config):
        mock_node.statuses = [pooled(), evicted("overspend")]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID)

        assert result.state == TxnState.EVICTED
        assert result.reason == "overspend"

    @pytest.mark.asyncio
    async def test_not_found_is_unknown(self, mock_node, test_config):
        mock_node.statuses = [None]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID)

        assert result.state == TxnState.UNKNOWN
        assert mock_node.poll_count == 1

    @pytest.mark.asyncio
    async def test_round_deadline_reports_unknown(self, mock_node, test_config):
        mock_node.statuses = [pooled()]
        mock_node.rounds = [1000, 1001, 1002]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1001)

        assert result.state == TxnState.UNKNOWN
        assert result.state != TxnState.EVICTED
        assert "1001" in result.reason
        # three loop polls plus the final check
        assert mock_node.poll_count == 4

    @pytest.mark.asyncio
    async def test_confirmation_seen_on_final_check(self, mock_node, test_config):
        mock_node.statuses = [pooled(), confirmed(1000)]
        mock_node.rounds = [1001]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1000)

        assert result.state == TxnState.CONFIRMED
        assert result.confirmed_round == 1000

    @pytest.mark.asyncio
    async def test_eviction_after_deadline_is_unknown(self, mock_node, test_config):
        mock_node.statuses = [pooled(), evicted("txn dead: round 1001 outside of 900--1000")]
        mock_node.rounds = [1001]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1000)

        assert result.state == TxnState.UNKNOWN

    @pytest.mark.asyncio
    async def test_pool_error_on_first_poll_past_deadline_is_unknown(self, mock_node, test_config):
        reason = "txn dead: round 1001 outside of 900--1000"
        mock_node.statuses = [evicted(reason)]
        mock_node.rounds = [1001]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1000)

        assert result.state == TxnState.UNKNOWN
        assert result.status.pool_error == reason
        assert mock_node.poll_count == 1

    @pytest.mark.asyncio
    async def test_pool_error_within_deadline_is_evicted(self, mock_node, test_config):
        mock_node.statuses = [evicted("overspend")]
        mock_node.rounds = [999]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1000)

        assert result.state == TxnState.EVICTED
        assert result.reason == "overspend"

    @pytest.mark.asyncio
    async def test_poll_errors_are_retried(self, mock_node, test_config):
        mock_node.statuses = [PollError("connection reset"), PollError("timeout"), confirmed()]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID)

        assert result.state == TxnState.CONFIRMED
        assert mock_node.poll_count == 3

    @pytest.mark.asyncio
    async def test_round_poll_error_keeps_polling(self, mock_node, test_config):
        mock_node.statuses = [pooled(), confirmed()]
        mock_node.rounds = [PollError("status unavailable"), 1000]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, last_valid_round=1000)

        assert result.state == TxnState.CONFIRMED

    @pytest.mark.asyncio
    async def test_timeout_returns_last_state(self, mock_node, test_config):
        mock_node.statuses = [pooled()]
        tracker = PendingTransactionTracker(mock_node, test_config)

        result = await tracker.wait(TXID, timeout_seconds=0.01)

        assert result.state == TxnState.POOLED
        assert result.is_terminal is False

    @pytest.mark.asyncio
    async def test_concurrent_waits_are_independent(self, mock_node, test_config):
        mock_node.statuses = [confirmed()]
        tracker = PendingTransactionTracker(mock_node, test_config)
        other = generate_test_txid(2)

        first, second = await asyncio.gather(tracker.wait(TXID), tracker.wait(other))

        assert first.txid == TXID
        assert second.txid == other


# ============================================================================
# Test Transaction Client
# ============================================================================

class TestTransactionClient:
    """Tests for the build, sign, submit and track flow."""

    @pytest.mark.asyncio
    async def test_build_and_send_creation(self, mock_node, test_config, test_signer):
        mock_node.statuses = [pooled(), confirmed(1001, asset_index=31566704)]
        client = TransactionClient(mock_node, test_signer, test_config)

        builder = AssetConfigTransactionBuilder().total(10).decimals(0).manager(test_signer.address)
        result = await client.build_and_send(builder)

        assert result.state == TxnState.CONFIRMED
        assert result.asset_index == 31566704
        assert len(mock_node.submitted) == 1

        envelope = msgpack.unpackb(mock_node.submitted[0], raw=False)
        assert envelope["txn"]["snd"] == test_signer.address.public_key
        assert envelope["txn"]["fv"] == 1001
        assert envelope["txn"]["lv"] == 1001 + test_config.validity_rounds
        assert envelope["txn"]["fee"] == 1000

    @pytest.mark.asyncio
    async def test_build_and_send_without_signer(self, mock_node, test_config):
        client = TransactionClient(mock_node, config=test_config)

        with pytest.raises(SigningError, match="No signing key loaded"):
            await client.build_and_send(AssetConfigTransactionBuilder().asset_id(1).destroy())

    @pytest.mark.asyncio
    async def test_submit_returns_txid(self, mock_node, test_config, test_signer):
        client = TransactionClient(mock_node, test_signer, test_config)
        builder = AssetConfigTransactionBuilder().asset_id(7).destroy()
        await client.prepare(builder)
        signed = test_signer.sign_transaction(builder.sender(test_signer.address).build())

        txid = await client.submit(signed)

        assert txid == signed.txid

    @pytest.mark.asyncio
    async def test_submission_error_propagates(self, mock_node, test_config, test_signer):
        async def reject(data):
            raise SubmissionError("TransactionPool.Remember: fee 0 below threshold", "400")

        mock_node.submit_raw_transaction = reject
        client = TransactionClient(mock_node, test_signer, test_config)
        builder = AssetConfigTransactionBuilder().asset_id(7).destroy()

        with pytest.raises(SubmissionError, match="below threshold"):
            await client.build_and_send(builder)
        assert mock_node.poll_count == 0

    @pytest.mark.asyncio
    async def test_submit_empty_group(self, mock_node, test_config):
        client = TransactionClient(mock_node, config=test_config)

        with pytest.raises(SubmissionError, match="empty group"):
            await client.submit_group([])
