"""
Core module.

Address, transaction record and pending-status models.
"""

from algotx.core.address import Address, MultisigAccount
from algotx.core.pending import (
    PendingTransactionStatus,
    TrackingResult,
    TxnState,
    interpret_status,
)
from algotx.core.transaction import Transaction, TransactionType

__all__ = [
    "Address",
    "MultisigAccount",
    "PendingTransactionStatus",
    "TrackingResult",
    "TxnState",
    "interpret_status",
    "Transaction",
    "TransactionType",
]
