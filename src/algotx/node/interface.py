"""
Abstract interface for node integration.

Defines the contract for network access that all node adapters must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from algotx.core.pending import PendingTransactionStatus


@dataclass
class SuggestedParams:
    """Transaction parameters suggested by the node."""
    fee: int                           # Fee per byte
    min_fee: int                       # Minimum fee per transaction
    last_round: int                    # Latest round seen by the node
    genesis_id: str                    # Network identifier, e.g. "testnet-v1.0"
    genesis_hash: bytes                # 32-byte genesis block hash
    consensus_version: str = ""        # Consensus protocol in effect


@dataclass
class NodeStatus:
    """Current node status."""
    last_round: int
    time_since_last_round_ns: int = 0
    catchup_time_ns: int = 0
    last_version: str = ""


class NodeInterface(ABC):
    """
    Abstract interface for node access.

    This interface defines the network operations the pipeline needs:
    - Suggested transaction parameters
    - Current round
    - Raw transaction submission
    - Pending transaction status
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            NodeConnectionError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def get_suggested_params(self) -> SuggestedParams:
        """
        Get suggested transaction parameters.

        Returns:
            Fee, validity and genesis parameters from the node
        """
        pass

    @abstractmethod
    async def get_status(self) -> NodeStatus:
        """
        Get current node status.

        Raises:
            PollError: On transient failures
        """
        pass

    @abstractmethod
    async def submit_raw_transaction(self, data: bytes) -> str:
        """
        Submit encoded signed transaction bytes.

        Args:
            data: One encoded signed transaction, or a concatenated group

        Returns:
            Transaction id reported by the node

        Raises:
            SubmissionError: If the node rejects the bytes
        """
        pass

    @abstractmethod
    async def pending_transaction_info(self, txid: str) -> Optional[PendingTransactionStatus]:
        """
        Get the node's view of a recently submitted transaction.

        Args:
            txid: Transaction id

        Returns:
            Status snapshot, or None if the node has no record of the id

        Raises:
            PollError: On transient failures
        """
        pass

    async def get_current_round(self) -> int:
        """Latest round known to the node."""
        status = await self.get_status()
        return status.last_round
