"""
Pending transaction status.

A node reports one of the following for a recently submitted transaction:
- committed (confirmed round > 0)
- still in the pool (confirmed round = 0, pool error = "")
- removed from the pool (confirmed round = 0, pool error != "")
- not found, when the node never saw it or no longer remembers it
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TxnState(str, Enum):
    """Settlement state of a submitted transaction."""
    SUBMITTED = "submitted"       # Sent to the node, no status seen yet
    POOLED = "pooled"             # Waiting in the node's pending pool
    CONFIRMED = "confirmed"       # Committed in a block
    EVICTED = "evicted"           # Dropped from the pool with a reason
    UNKNOWN = "unknown"           # Node has no record of it

    @property
    def is_terminal(self) -> bool:
        return self in (TxnState.CONFIRMED, TxnState.EVICTED, TxnState.UNKNOWN)


@dataclass(frozen=True)
class PendingTransactionStatus:
    """
    Snapshot of a node's view of one pending transaction.

    Attributes:
        txid: Identifier the snapshot was fetched with
        confirmed_round: Round the transaction was committed in, 0 if not yet
        pool_error: Why the node dropped it from its pool, "" if it did not
        application_index: Id of the application it created, if any
        asset_index: Id of the asset it created, if any
        closing_amount: Amount sent to the close-remainder-to account
        close_rewards: Rewards applied to the close-remainder-to account
        sender_rewards: Rewards applied to the sender
        receiver_rewards: Rewards applied to the receiver
    """

    txid: str
    confirmed_round: int = 0
    pool_error: str = ""
    application_index: Optional[int] = None
    asset_index: Optional[int] = None
    closing_amount: Optional[int] = None
    close_rewards: Optional[int] = None
    sender_rewards: Optional[int] = None
    receiver_rewards: Optional[int] = None

    @classmethod
    def from_response(cls, txid: str, data: Dict[str, Any]) -> "PendingTransactionStatus":
        """Build a snapshot from an algod pending-transaction response body."""
        return cls(
            txid=txid,
            confirmed_round=int(data.get("confirmed-round") or 0),
            pool_error=data.get("pool-error") or "",
            application_index=_optional_int(data.get("application-index")),
            asset_index=_optional_int(data.get("asset-index")),
            closing_amount=_optional_int(data.get("closing-amount")),
            close_rewards=_optional_int(data.get("close-rewards")),
            sender_rewards=_optional_int(data.get("sender-rewards")),
            receiver_rewards=_optional_int(data.get("receiver-rewards")),
        )


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class TrackingResult:
    """
    Outcome of interpreting (or waiting on) a transaction's status.

    Confirmed, Evicted and Unknown are distinct completions the caller
    must branch on; none of them is an exception.

    Attributes:
        txid: Transaction identifier
        state: Interpreted settlement state
        status: Last snapshot received, None if the node had no record
        reason: Pool error for Evicted, explanation for Unknown
    """

    txid: str
    state: TxnState
    status: Optional[PendingTransactionStatus] = None
    reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def confirmed_round(self) -> Optional[int]:
        if self.state is TxnState.CONFIRMED and self.status is not None:
            return self.status.confirmed_round
        return None

    @property
    def asset_index(self) -> Optional[int]:
        if self.state is TxnState.CONFIRMED and self.status is not None:
            return self.status.asset_index
        return None

    @property
    def application_index(self) -> Optional[int]:
        if self.state is TxnState.CONFIRMED and self.status is not None:
            return self.status.application_index
        return None


def interpret_status(
    txid: str,
    status: Optional[PendingTransactionStatus],
) -> TrackingResult:
    """
    Map a poll response onto a settlement state.

    Args:
        txid: Transaction identifier that was polled
        status: Snapshot returned by the node, None for "not found"

    Returns:
        TrackingResult for the response
    """
    if status is None:
        return TrackingResult(
            txid=txid,
            state=TxnState.UNKNOWN,
            reason="transaction not found on node",
        )

    if status.confirmed_round > 0:
        return TrackingResult(txid=txid, state=TxnState.CONFIRMED, status=status)

    if status.pool_error:
        return TrackingResult(
            txid=txid,
            state=TxnState.EVICTED,
            status=status,
            reason=status.pool_error,
        )

    return TrackingResult(txid=txid, state=TxnState.POOLED, status=status)
