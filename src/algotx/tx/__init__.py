"""
Transaction module.

Handles transaction construction, encoding, signing and tracking.
"""

from algotx.tx.application import ApplicationCallTransactionBuilder
from algotx.tx.asset import AssetFreezeTransactionBuilder, AssetTransferTransactionBuilder
from algotx.tx.asset_config import AssetConfigTransactionBuilder
from algotx.tx.builder import TransactionBuilder
from algotx.tx.encoding import encode_transaction, transaction_id
from algotx.tx.group import assign_group_id, compute_group_id
from algotx.tx.keyreg import KeyRegistrationTransactionBuilder
from algotx.tx.payment import PaymentTransactionBuilder
from algotx.tx.signer import SignedTransaction, TransactionSigner
from algotx.tx.tracker import PendingTransactionTracker

__all__ = [
    "ApplicationCallTransactionBuilder",
    "AssetFreezeTransactionBuilder",
    "AssetTransferTransactionBuilder",
    "AssetConfigTransactionBuilder",
    "TransactionBuilder",
    "encode_transaction",
    "transaction_id",
    "assign_group_id",
    "compute_group_id",
    "KeyRegistrationTransactionBuilder",
    "PaymentTransactionBuilder",
    "SignedTransaction",
    "TransactionSigner",
    "PendingTransactionTracker",
]
