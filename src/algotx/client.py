"""
Transaction Client - ties signing, submission and tracking together.
"""

from typing import Optional, Sequence

import structlog

from algotx.config import AlgoTxConfig, get_config
from algotx.core.pending import TrackingResult
from algotx.exceptions import SigningError, SubmissionError
from algotx.node.interface import NodeInterface
from algotx.tx.builder import TransactionBuilder
from algotx.tx.signer import SignedTransaction, TransactionSigner
from algotx.tx.tracker import PendingTransactionTracker

logger = structlog.get_logger(__name__)


class TransactionClient:
    """
    Submits signed transactions and waits for their settlement.

    Submission errors are never retried: the node would reject identical
    bytes the same way.
    """

    def __init__(
        self,
        node: NodeInterface,
        signer: Optional[TransactionSigner] = None,
        config: Optional[AlgoTxConfig] = None,
    ):
        """
        Initialize the client.

        Args:
            node: Node interface for submission and polling
            signer: Signer used by build_and_send()
            config: Configuration
        """
        self.node = node
        self.signer = signer
        self.config = config or get_config()
        self.tracker = PendingTransactionTracker(node, self.config)

    async def prepare(self, builder: TransactionBuilder) -> TransactionBuilder:
        """Fill a builder's fee, validity window and genesis data from the node."""
        params = await self.node.get_suggested_params()
        return builder.suggested_params(params, validity_rounds=self.config.validity_rounds)

    async def submit(self, signed: SignedTransaction) -> str:
        """
        Submit one signed transaction.

        Returns:
            Transaction id

        Raises:
            SubmissionError: If the node rejects it
        """
        txid = await self.node.submit_raw_transaction(signed.encode())
        if txid != signed.txid:
            logger.warning("txid_mismatch", expected=signed.txid, reported=txid)
        return txid

    async def submit_group(self, signed: Sequence[SignedTransaction]) -> str:
        """
        Submit an atomic group as one concatenated payload.

        Returns:
            Transaction id of the first member, as reported by the node
        """
        if not signed:
            raise SubmissionError("Cannot submit an empty group")
        return await self.node.submit_raw_transaction(b"".join(s.encode() for s in signed))

    async def submit_and_wait(
        self,
        signed: SignedTransaction,
        timeout_seconds: Optional[float] = None,
    ) -> TrackingResult:
        """
        Submit a signed transaction and wait until it settles.

        Polling stops once the network passes the transaction's last
        valid round.
        """
        txid = await self.submit(signed)
        return await self.tracker.wait(
            txid,
            last_valid_round=signed.transaction.last_valid,
            timeout_seconds=timeout_seconds,
        )

    async def build_and_send(
        self,
        builder: TransactionBuilder,
        timeout_seconds: Optional[float] = None,
    ) -> TrackingResult:
        """
        Prepare, build, sign, submit and track a transaction.

        The builder's sender defaults to the signer's address.
        """
        if self.signer is None or not self.signer.is_loaded:
            raise SigningError("No signing key loaded")

        await self.prepare(builder)
        if builder.configured_sender is None:
            builder.sender(self.signer.address)

        txn = builder.build()
        signed = self.signer.sign_transaction(txn)
        logger.info("tx_sending", txid=signed.txid, type=txn.type.value, fee=txn.fee)
        return await self.submit_and_wait(signed, timeout_seconds=timeout_seconds)
