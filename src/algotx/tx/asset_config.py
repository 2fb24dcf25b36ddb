"""
Asset configuration transactions.

One builder covers the three sub-cases:
- creation: asset_id absent or zero; total and decimals are required
- reconfiguration: asset_id set; only role addresses may change, and a
  role address left unset is permanently disabled
- destroy: asset_id set and destroy(); no other configuration allowed
"""

from typing import Optional

from algotx.core.transaction import AssetConfigFields, TransactionType
from algotx.tx.builder import (
    AddressLike,
    TransactionBuilder,
    b64_to_bytes,
    text_to_bytes,
    to_address,
)


class AssetConfigTransactionBuilder(TransactionBuilder):
    """Builds asset creation, reconfiguration and destroy transactions."""

    TYPE = TransactionType.ASSET_CONFIG
    FIELDS = AssetConfigFields

    def asset_id(self, asset_id: Optional[int]) -> "AssetConfigTransactionBuilder":
        """
        The unique id of the asset.

        Zero or None on creation; the existing asset id for reconfiguration
        and destroy.
        """
        return self._set("asset_id", asset_id)

    def total(self, total: Optional[int]) -> "AssetConfigTransactionBuilder":
        """Total number of base units. Required on creation, fixed afterwards."""
        return self._set("total", total)

    def decimals(self, decimals: Optional[int]) -> "AssetConfigTransactionBuilder":
        """
        Digits after the decimal point when displaying the asset (0-19).

        0 means the asset is not divisible, 2 means base units are hundredths.
        Required on creation.
        """
        return self._set("decimals", decimals)

    def default_frozen(self, frozen: Optional[bool]) -> "AssetConfigTransactionBuilder":
        """Whether holdings of the asset are frozen by default."""
        return self._set("default_frozen", frozen)

    def unit_name(self, name: Optional[str]) -> "AssetConfigTransactionBuilder":
        """Name of one unit, at most 8 bytes. Example: USDT."""
        return self._set("unit_name", name)

    def asset_name(self, name: Optional[str]) -> "AssetConfigTransactionBuilder":
        """Name of the asset, at most 32 bytes. Example: Tether."""
        return self._set("asset_name", name)

    def url(self, url: Optional[str]) -> "AssetConfigTransactionBuilder":
        """Where more information about the asset lives, at most 96 bytes."""
        return self._set("url", url)

    def metadata_hash(self, data: Optional[bytes]) -> "AssetConfigTransactionBuilder":
        """
        32-byte hash of metadata relevant to the asset.

        The format is up to the application, e.g. the hash of a certificate
        tying the asset to a real-world one. Creation only.
        """
        return self._set("metadata_hash", data)

    def metadata_text(self, data: Optional[str]) -> "AssetConfigTransactionBuilder":
        """Metadata hash given as text, stored as its UTF-8 bytes."""
        return self.metadata_hash(text_to_bytes(data))

    def metadata_b64(self, data: Optional[str]) -> "AssetConfigTransactionBuilder":
        """Metadata hash given as base64 text."""
        return self.metadata_hash(b64_to_bytes(data))

    def manager(self, address: Optional[AddressLike]) -> "AssetConfigTransactionBuilder":
        """Account allowed to reconfigure and destroy the asset."""
        return self._set("manager", to_address(address))

    def reserve(self, address: Optional[AddressLike]) -> "AssetConfigTransactionBuilder":
        """
        Account holding the non-minted units.

        Has no protocol authority; it signals to holders where the reserve
        lives when that differs from the creator.
        """
        return self._set("reserve", to_address(address))

    def freeze(self, address: Optional[AddressLike]) -> "AssetConfigTransactionBuilder":
        """Account allowed to freeze holdings. Unset disables freezing."""
        return self._set("freeze", to_address(address))

    def clawback(self, address: Optional[AddressLike]) -> "AssetConfigTransactionBuilder":
        """Account allowed to claw back holdings. Unset disables clawback."""
        return self._set("clawback", to_address(address))

    def destroy(self, destroy: bool = True) -> "AssetConfigTransactionBuilder":
        """
        Remove the asset from the ledger.

        The creator must hold every unit and the manager must send the
        transaction.
        """
        return self._set("destroy", bool(destroy))
