"""
Transaction records.

A Transaction carries the fields common to every transaction type plus a
variant payload tagged by TransactionType. Records are frozen; builders
in algotx.tx produce them.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, ClassVar, Optional, Tuple, Union

from algotx.core.address import Address

# Protocol limits
MAX_UINT64 = 2**64 - 1
HASH_LENGTH = 32
LEASE_LENGTH = 32
MAX_NOTE_LENGTH = 1024
MIN_TXN_FEE = 1000
MAX_GROUP_SIZE = 16

MAX_ASSET_DECIMALS = 19
MAX_UNIT_NAME_LENGTH = 8
MAX_ASSET_NAME_LENGTH = 32
MAX_URL_LENGTH = 96
METADATA_HASH_LENGTH = 32

VOTE_KEY_LENGTH = 32
SELECTION_KEY_LENGTH = 32
STATE_PROOF_KEY_LENGTH = 64

MAX_APP_ARGS = 16
MAX_APP_ACCOUNTS = 4
MAX_APP_TOTAL_REFERENCES = 8
MAX_EXTRA_PROGRAM_PAGES = 3


def is_unset(value: Any, fixed_size: bool = False) -> bool:
    """
    Whether a field value encodes the same as leaving the field absent.

    None, False, zero, empty strings, bytes and collections, and the zero
    address are omitted from the canonical encoding. With fixed_size, an
    all-zero digest or key is omitted as well.
    """
    if value is None or value is False:
        return True
    if isinstance(value, Address):
        return value.is_zero
    if isinstance(value, (bytes, bytearray)):
        return not any(value) if fixed_size else len(value) == 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, int):
        return value == 0
    return False


class TransactionType(str, Enum):
    """Wire tag of each transaction type."""
    PAYMENT = "pay"
    ASSET_CONFIG = "acfg"
    ASSET_TRANSFER = "axfer"
    ASSET_FREEZE = "afrz"
    KEY_REGISTRATION = "keyreg"
    APPLICATION_CALL = "appl"


class OnComplete(IntEnum):
    """Action taken after an application call's approval program runs."""
    NO_OP = 0
    OPT_IN = 1
    CLOSE_OUT = 2
    CLEAR_STATE = 3
    UPDATE_APPLICATION = 4
    DELETE_APPLICATION = 5


@dataclass(frozen=True)
class PaymentFields:
    """Payment of the native currency."""
    TYPE: ClassVar[TransactionType] = TransactionType.PAYMENT

    receiver: Optional[Address] = None
    amount: Optional[int] = None
    close_remainder_to: Optional[Address] = None


@dataclass(frozen=True)
class AssetConfigFields:
    """
    Asset creation, reconfiguration or destruction.

    An absent or zero asset_id means the transaction creates a new asset.
    A destroy carries only the asset id; on the wire it is an asset
    configuration with no parameters.
    """
    TYPE: ClassVar[TransactionType] = TransactionType.ASSET_CONFIG

    # Fields that may only be supplied when the asset is created
    CREATION_FIELDS: ClassVar[Tuple[str, ...]] = (
        "total",
        "decimals",
        "default_frozen",
        "unit_name",
        "asset_name",
        "url",
        "metadata_hash",
    )
    ROLE_FIELDS: ClassVar[Tuple[str, ...]] = ("manager", "reserve", "freeze", "clawback")
    DIGEST_FIELDS: ClassVar[Tuple[str, ...]] = ("metadata_hash",)

    asset_id: Optional[int] = None
    total: Optional[int] = None
    decimals: Optional[int] = None
    default_frozen: Optional[bool] = None
    unit_name: Optional[str] = None
    asset_name: Optional[str] = None
    url: Optional[str] = None
    metadata_hash: Optional[bytes] = None
    manager: Optional[Address] = None
    reserve: Optional[Address] = None
    freeze: Optional[Address] = None
    clawback: Optional[Address] = None
    destroy: bool = False

    @property
    def is_creation(self) -> bool:
        return not self.asset_id

    def configured_fields(self) -> Tuple[str, ...]:
        """Names of configuration fields that carry a non-empty value, in declaration order."""
        names = self.CREATION_FIELDS + self.ROLE_FIELDS
        return tuple(
            name for name in names
            if not is_unset(getattr(self, name), fixed_size=name in self.DIGEST_FIELDS)
        )


@dataclass(frozen=True)
class AssetTransferFields:
    """
    Asset transfer, opt-in, opt-out or clawback.

    An opt-in is a zero-amount transfer from an account to itself.
    """
    TYPE: ClassVar[TransactionType] = TransactionType.ASSET_TRANSFER

    asset_id: Optional[int] = None
    amount: Optional[int] = None
    receiver: Optional[Address] = None
    revocation_target: Optional[Address] = None
    close_assets_to: Optional[Address] = None


@dataclass(frozen=True)
class AssetFreezeFields:
    """Freeze or unfreeze one account's holding of an asset."""
    TYPE: ClassVar[TransactionType] = TransactionType.ASSET_FREEZE

    asset_id: Optional[int] = None
    target: Optional[Address] = None
    frozen: Optional[bool] = None


@dataclass(frozen=True)
class KeyRegistrationFields:
    """Register participation keys (online) or go offline."""
    TYPE: ClassVar[TransactionType] = TransactionType.KEY_REGISTRATION

    ONLINE_FIELDS: ClassVar[Tuple[str, ...]] = (
        "vote_key",
        "selection_key",
        "vote_first",
        "vote_last",
        "vote_key_dilution",
    )

    vote_key: Optional[bytes] = None
    selection_key: Optional[bytes] = None
    state_proof_key: Optional[bytes] = None
    vote_first: Optional[int] = None
    vote_last: Optional[int] = None
    vote_key_dilution: Optional[int] = None
    non_participation: Optional[bool] = None


@dataclass(frozen=True)
class StateSchema:
    """Storage allotment for an application's global or local state."""
    num_uints: int = 0
    num_byte_slices: int = 0


@dataclass(frozen=True)
class ApplicationCallFields:
    """
    Application call. An absent or zero app_id creates the application.
    """
    TYPE: ClassVar[TransactionType] = TransactionType.APPLICATION_CALL

    app_id: Optional[int] = None
    on_complete: Optional[OnComplete] = None
    approval_program: Optional[bytes] = None
    clear_program: Optional[bytes] = None
    app_args: Tuple[bytes, ...] = ()
    accounts: Tuple[Address, ...] = ()
    foreign_apps: Tuple[int, ...] = ()
    foreign_assets: Tuple[int, ...] = ()
    global_schema: Optional[StateSchema] = None
    local_schema: Optional[StateSchema] = None
    extra_pages: Optional[int] = None

    @property
    def is_creation(self) -> bool:
        return not self.app_id


VariantFields = Union[
    PaymentFields,
    AssetConfigFields,
    AssetTransferFields,
    AssetFreezeFields,
    KeyRegistrationFields,
    ApplicationCallFields,
]


@dataclass(frozen=True)
class Transaction:
    """
    An immutable, validated transaction.

    Attributes:
        type: Transaction type tag; always matches fields.TYPE
        sender: Account that authorizes and pays for the transaction
        fee: Fee in base units
        first_valid: First round in which the transaction may be confirmed
        last_valid: Last round in which the transaction may be confirmed
        genesis_hash: 32-byte hash of the network's genesis block
        genesis_id: Human-readable network identifier
        note: Arbitrary data, at most 1024 bytes
        group: 32-byte atomic group identifier
        rekey_to: Address the sender's authorization moves to
        lease: 32-byte lease enforcing mutual exclusion
        fields: Variant-specific payload
    """

    type: TransactionType
    sender: Optional[Address]
    fee: Optional[int]
    first_valid: Optional[int]
    last_valid: Optional[int]
    genesis_hash: Optional[bytes]
    genesis_id: Optional[str] = None
    note: Optional[bytes] = None
    group: Optional[bytes] = None
    rekey_to: Optional[Address] = None
    lease: Optional[bytes] = None
    fields: Optional[VariantFields] = None

    def replace(self, **changes) -> "Transaction":
        """Return a copy with the given attributes changed."""
        return dataclasses.replace(self, **changes)
