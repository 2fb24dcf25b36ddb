"""
algotx

Client-side transaction pipeline for Algorand-style ledgers: fluent
builders, canonical encoding, signing, submission and settlement tracking.
"""

__version__ = "0.1.0"

from algotx.core.address import Address, MultisigAccount
from algotx.core.pending import PendingTransactionStatus, TrackingResult, TxnState
from algotx.core.transaction import Transaction, TransactionType
from algotx.exceptions import (
    AlgoTxError,
    EncodingError,
    PollError,
    SigningError,
    SubmissionError,
    ValidationError,
)
from algotx.tx.asset_config import AssetConfigTransactionBuilder
from algotx.tx.encoding import encode_transaction, transaction_id
from algotx.tx.signer import SignedTransaction, TransactionSigner

__all__ = [
    "Address",
    "MultisigAccount",
    "PendingTransactionStatus",
    "TrackingResult",
    "TxnState",
    "Transaction",
    "TransactionType",
    "AlgoTxError",
    "EncodingError",
    "PollError",
    "SigningError",
    "SubmissionError",
    "ValidationError",
    "AssetConfigTransactionBuilder",
    "encode_transaction",
    "transaction_id",
    "SignedTransaction",
    "TransactionSigner",
]
