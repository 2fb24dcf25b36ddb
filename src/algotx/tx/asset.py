"""
Asset transfer and asset freeze transactions.
"""

from typing import Optional

from algotx.core.transaction import (
    AssetFreezeFields,
    AssetTransferFields,
    TransactionType,
)
from algotx.tx.builder import AddressLike, TransactionBuilder, to_address


class AssetTransferTransactionBuilder(TransactionBuilder):
    """
    Builds asset transfers.

    Also covers opt-in (zero amount to self, see opt_in()), opt-out
    (close_assets_to) and clawback (revocation_target, sent by the
    clawback account).
    """

    TYPE = TransactionType.ASSET_TRANSFER
    FIELDS = AssetTransferFields

    def asset_id(self, asset_id: Optional[int]) -> "AssetTransferTransactionBuilder":
        return self._set("asset_id", asset_id)

    def amount(self, amount: Optional[int]) -> "AssetTransferTransactionBuilder":
        """Amount in the asset's base units."""
        return self._set("amount", amount)

    def receiver(self, address: Optional[AddressLike]) -> "AssetTransferTransactionBuilder":
        return self._set("receiver", to_address(address))

    def revocation_target(self, address: Optional[AddressLike]) -> "AssetTransferTransactionBuilder":
        """Account the clawback account takes the asset from."""
        return self._set("revocation_target", to_address(address))

    def close_assets_to(self, address: Optional[AddressLike]) -> "AssetTransferTransactionBuilder":
        """Remove the asset holding, sending the remaining balance here."""
        return self._set("close_assets_to", to_address(address))

    def opt_in(self, account: AddressLike, asset_id: int) -> "AssetTransferTransactionBuilder":
        """Configure a zero-amount transfer from an account to itself."""
        self.sender(account)
        self.receiver(account)
        self.amount(None)
        return self.asset_id(asset_id)


class AssetFreezeTransactionBuilder(TransactionBuilder):
    """Builds freeze/unfreeze transactions, sent by the asset's freeze account."""

    TYPE = TransactionType.ASSET_FREEZE
    FIELDS = AssetFreezeFields

    def asset_id(self, asset_id: Optional[int]) -> "AssetFreezeTransactionBuilder":
        return self._set("asset_id", asset_id)

    def target(self, address: Optional[AddressLike]) -> "AssetFreezeTransactionBuilder":
        """Account whose holding is frozen or unfrozen."""
        return self._set("target", to_address(address))

    def frozen(self, frozen: Optional[bool]) -> "AssetFreezeTransactionBuilder":
        return self._set("frozen", frozen)
