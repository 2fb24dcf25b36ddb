"""
Transaction Builder - shared base contract.

Builders accumulate field values through chained setters and freeze them
into an immutable Transaction on build(). Each transaction type has its
own subclass adding type-specific setters; validation dispatches on the
type tag in algotx.tx.validation.
"""

import base64
from typing import Any, ClassVar, Dict, Optional, Type, Union

import structlog

from algotx.core.address import Address
from algotx.core.transaction import MIN_TXN_FEE, Transaction, TransactionType
from algotx.node.interface import SuggestedParams
from algotx.tx.encoding import encode_transaction
from algotx.tx.validation import validate_transaction

logger = structlog.get_logger(__name__)

DEFAULT_VALIDITY_ROUNDS = 1000

# {"sig": <64-byte signature>, "txn": ...} adds 75 bytes around the transaction
SIGNATURE_OVERHEAD = 75

_MAX_FEE_ITERATIONS = 8

AddressLike = Union[Address, str, bytes]


def to_address(value: Optional[AddressLike]) -> Optional[Address]:
    """Coerce an address argument, keeping None as absent."""
    if value is None:
        return None
    return Address.coerce(value)


def b64_to_bytes(value: Optional[str]) -> Optional[bytes]:
    if value is None:
        return None
    return base64.b64decode(value, validate=True)


def text_to_bytes(value: Optional[str]) -> Optional[bytes]:
    if value is None:
        return None
    return value.encode("utf-8")


class TransactionBuilder:
    """
    Base builder holding the fields common to every transaction.

    Every setter accepts None to clear a field and returns the builder.
    Setting a field twice keeps the last value. A builder is owned by a
    single caller; it is not safe to share between threads.

    Subclasses set TYPE and FIELDS and add setters that store values with
    _set(); the stored values become the keyword arguments of FIELDS.
    """

    TYPE: ClassVar[TransactionType]
    FIELDS: ClassVar[Type]

    def __init__(self):
        self._sender: Optional[Address] = None
        self._fee: Optional[int] = None
        self._fee_per_byte: Optional[int] = None
        self._min_fee: int = MIN_TXN_FEE
        self._first_valid: Optional[int] = None
        self._last_valid: Optional[int] = None
        self._genesis_hash: Optional[bytes] = None
        self._genesis_id: Optional[str] = None
        self._note: Optional[bytes] = None
        self._group: Optional[bytes] = None
        self._rekey_to: Optional[Address] = None
        self._lease: Optional[bytes] = None
        self._values: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Common fields
    # ------------------------------------------------------------------

    def sender(self, address: Optional[AddressLike]) -> "TransactionBuilder":
        """The account that authorizes the transaction and pays the fee."""
        self._sender = to_address(address)
        return self

    def fee(self, fee: Optional[int]) -> "TransactionBuilder":
        """Set a flat fee, replacing any per-byte fee."""
        self._fee = fee
        self._fee_per_byte = None
        return self

    def fee_per_byte(
        self,
        fee_per_byte: Optional[int],
        min_fee: int = MIN_TXN_FEE,
    ) -> "TransactionBuilder":
        """
        Compute the fee from the signed size on build.

        The fee becomes max(min_fee, fee_per_byte * signed size).
        """
        self._fee_per_byte = fee_per_byte
        self._min_fee = min_fee
        if fee_per_byte is not None:
            self._fee = None
        return self

    def first_valid(self, round_number: Optional[int]) -> "TransactionBuilder":
        self._first_valid = round_number
        return self

    def last_valid(self, round_number: Optional[int]) -> "TransactionBuilder":
        self._last_valid = round_number
        return self

    def genesis_hash(self, value: Optional[Union[bytes, str]]) -> "TransactionBuilder":
        """Genesis hash as raw bytes or base64 text."""
        if isinstance(value, str):
            value = b64_to_bytes(value)
        self._genesis_hash = value
        return self

    def genesis_id(self, value: Optional[str]) -> "TransactionBuilder":
        self._genesis_id = value
        return self

    def note(self, value: Optional[bytes]) -> "TransactionBuilder":
        """Arbitrary data attached to the transaction, at most 1024 bytes."""
        self._note = value
        return self

    def note_text(self, value: Optional[str]) -> "TransactionBuilder":
        return self.note(text_to_bytes(value))

    def note_b64(self, value: Optional[str]) -> "TransactionBuilder":
        return self.note(b64_to_bytes(value))

    def group(self, group_id: Optional[bytes]) -> "TransactionBuilder":
        self._group = group_id
        return self

    def rekey_to(self, address: Optional[AddressLike]) -> "TransactionBuilder":
        """Move the sender's signing authority to another account."""
        self._rekey_to = to_address(address)
        return self

    def lease(self, value: Optional[bytes]) -> "TransactionBuilder":
        """32-byte lease; no other transaction with the same sender and lease
        can be confirmed until last_valid has passed."""
        self._lease = value
        return self

    def lease_b64(self, value: Optional[str]) -> "TransactionBuilder":
        return self.lease(b64_to_bytes(value))

    def suggested_params(
        self,
        params: SuggestedParams,
        flat_fee: bool = False,
        validity_rounds: int = DEFAULT_VALIDITY_ROUNDS,
    ) -> "TransactionBuilder":
        """
        Fill fee, validity window and genesis data from node parameters.

        Args:
            params: Parameters reported by the node
            flat_fee: Use params.fee as the flat fee instead of a per-byte rate
            validity_rounds: Width of the validity window
        """
        first = params.last_round + 1
        self.first_valid(first)
        self.last_valid(first + validity_rounds)
        self.genesis_hash(params.genesis_hash)
        self.genesis_id(params.genesis_id)
        if flat_fee:
            self.fee(params.fee)
        else:
            self.fee_per_byte(params.fee, params.min_fee)
        return self

    @property
    def configured_sender(self) -> Optional[Address]:
        return self._sender

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _set(self, name: str, value: Any) -> "TransactionBuilder":
        self._values[name] = value
        return self

    def _assemble(self, fee: Optional[int]) -> Transaction:
        return Transaction(
            type=self.TYPE,
            sender=self._sender,
            fee=fee,
            first_valid=self._first_valid,
            last_valid=self._last_valid,
            genesis_hash=self._genesis_hash,
            genesis_id=self._genesis_id,
            note=self._note,
            group=self._group,
            rekey_to=self._rekey_to,
            lease=self._lease,
            fields=self.FIELDS(**self._values),
        )

    def _resolve_fee(self, txn: Transaction) -> int:
        # Raising the fee can widen its encoding, so iterate until stable.
        fee = self._min_fee
        for _ in range(_MAX_FEE_ITERATIONS):
            size = len(encode_transaction(txn.replace(fee=fee))) + SIGNATURE_OVERHEAD
            required = max(self._min_fee, self._fee_per_byte * size)
            if required <= fee:
                return fee
            fee = required
        return fee

    def build(self) -> Transaction:
        """
        Validate the configured fields and freeze them into a Transaction.

        Returns:
            A new immutable Transaction

        Raises:
            ValidationError: Naming the first violated invariant
        """
        per_byte = self._fee_per_byte is not None
        txn = self._assemble(self._min_fee if per_byte else self._fee)
        validate_transaction(txn)

        if per_byte:
            txn = txn.replace(fee=self._resolve_fee(txn))
            validate_transaction(txn)

        logger.debug(
            "transaction_built",
            type=txn.type.value,
            fee=txn.fee,
            first_valid=txn.first_valid,
            last_valid=txn.last_valid,
        )
        return txn

    def estimate_transaction_size(self) -> int:
        """
        Exact length of the canonical encoding of build(), without signing.

        Raises:
            ValidationError: If the configured fields do not build
        """
        return len(encode_transaction(self.build()))
