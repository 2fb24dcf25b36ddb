"""
Payment transactions.
"""

from typing import Optional

from algotx.core.transaction import PaymentFields, TransactionType
from algotx.tx.builder import AddressLike, TransactionBuilder, to_address


class PaymentTransactionBuilder(TransactionBuilder):
    """Builds payments of the native currency."""

    TYPE = TransactionType.PAYMENT
    FIELDS = PaymentFields

    def receiver(self, address: Optional[AddressLike]) -> "PaymentTransactionBuilder":
        return self._set("receiver", to_address(address))

    def amount(self, amount: Optional[int]) -> "PaymentTransactionBuilder":
        """Amount in base units."""
        return self._set("amount", amount)

    def close_remainder_to(self, address: Optional[AddressLike]) -> "PaymentTransactionBuilder":
        """Close the sender account, sending whatever remains to this address."""
        return self._set("close_remainder_to", to_address(address))
