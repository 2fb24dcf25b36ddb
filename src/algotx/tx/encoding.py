"""
Canonical encoding.

Transactions are encoded as MessagePack maps keyed by protocol short
names. The encoding is canonical:

1. zero, empty and absent values are omitted entirely
2. map keys are sorted lexicographically at every level
3. integers use the smallest unsigned representation
4. addresses are their raw 32-byte public key; byte strings are `bin`

The same bytes are signed, hashed into the transaction id and submitted
to the network, so any deviation here is a consensus-level bug.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

import msgpack

from algotx.core.address import Address, encode_base32, sha512_256
from algotx.core.transaction import (
    MAX_UINT64,
    ApplicationCallFields,
    AssetConfigFields,
    AssetFreezeFields,
    AssetTransferFields,
    KeyRegistrationFields,
    PaymentFields,
    StateSchema,
    Transaction,
    TransactionType,
    is_unset,
)
from algotx.exceptions import EncodingError

TXID_PREFIX = b"TX"


def canonicalize(value: Any) -> Any:
    """
    Convert a value into its canonical, MessagePack-ready form.

    Maps lose their empty entries and are rebuilt in sorted key order.
    List elements are kept in order and never dropped.
    """
    if isinstance(value, dict):
        result = {}
        for key in sorted(value):
            item = canonicalize(value[key])
            if not is_unset(item):
                result[key] = item
        return result
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    if isinstance(value, Address):
        return value.public_key
    if isinstance(value, bool):
        return value
    if isinstance(value, Enum):
        return canonicalize(value.value)
    if isinstance(value, int):
        if value < 0 or value > MAX_UINT64:
            raise EncodingError(f"integer out of uint64 range: {value}")
        return int(value)
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def pack_canonical(obj: Dict[str, Any]) -> bytes:
    """Canonicalize a map and pack it to bytes."""
    try:
        return msgpack.packb(canonicalize(obj), use_bin_type=True)
    except (OverflowError, TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode transaction: {e}") from e


def _address(value: Optional[Address]) -> Optional[bytes]:
    # The zero address is the absent address on the wire.
    if is_unset(value):
        return None
    return value.public_key


def _digest(value: Optional[bytes]) -> Optional[bytes]:
    # Fixed-size digests and keys are absent when all zero.
    if is_unset(value, fixed_size=True):
        return None
    return value


def _payment(fields: PaymentFields) -> Dict[str, Any]:
    return {
        "rcv": _address(fields.receiver),
        "amt": fields.amount,
        "close": _address(fields.close_remainder_to),
    }


def _asset_config(fields: AssetConfigFields) -> Dict[str, Any]:
    params = {}
    if not fields.destroy:
        params = {
            "t": fields.total,
            "dc": fields.decimals,
            "df": fields.default_frozen,
            "un": fields.unit_name,
            "an": fields.asset_name,
            "au": fields.url,
            "am": _digest(fields.metadata_hash),
            "m": _address(fields.manager),
            "r": _address(fields.reserve),
            "f": _address(fields.freeze),
            "c": _address(fields.clawback),
        }
    return {
        "caid": fields.asset_id,
        "apar": params,
    }


def _asset_transfer(fields: AssetTransferFields) -> Dict[str, Any]:
    return {
        "xaid": fields.asset_id,
        "aamt": fields.amount,
        "arcv": _address(fields.receiver),
        "asnd": _address(fields.revocation_target),
        "aclose": _address(fields.close_assets_to),
    }


def _asset_freeze(fields: AssetFreezeFields) -> Dict[str, Any]:
    return {
        "faid": fields.asset_id,
        "fadd": _address(fields.target),
        "afrz": fields.frozen,
    }


def _key_registration(fields: KeyRegistrationFields) -> Dict[str, Any]:
    return {
        "votekey": _digest(fields.vote_key),
        "selkey": _digest(fields.selection_key),
        "sprfkey": _digest(fields.state_proof_key),
        "votefst": fields.vote_first,
        "votelst": fields.vote_last,
        "votekd": fields.vote_key_dilution,
        "nonpart": fields.non_participation,
    }


def _schema(schema: Optional[StateSchema]) -> Optional[Dict[str, Any]]:
    if schema is None:
        return None
    return {"nui": schema.num_uints, "nbs": schema.num_byte_slices}


def _application_call(fields: ApplicationCallFields) -> Dict[str, Any]:
    return {
        "apid": fields.app_id,
        "apan": fields.on_complete,
        "apap": fields.approval_program,
        "apsu": fields.clear_program,
        "apaa": list(fields.app_args),
        "apat": [account.public_key for account in fields.accounts],
        "apfa": list(fields.foreign_apps),
        "apas": list(fields.foreign_assets),
        "apgs": _schema(fields.global_schema),
        "apls": _schema(fields.local_schema),
        "apep": fields.extra_pages,
    }


_VARIANT_ENCODERS: Dict[TransactionType, Callable[[Any], Dict[str, Any]]] = {
    TransactionType.PAYMENT: _payment,
    TransactionType.ASSET_CONFIG: _asset_config,
    TransactionType.ASSET_TRANSFER: _asset_transfer,
    TransactionType.ASSET_FREEZE: _asset_freeze,
    TransactionType.KEY_REGISTRATION: _key_registration,
    TransactionType.APPLICATION_CALL: _application_call,
}


def transaction_to_dict(txn: Transaction) -> Dict[str, Any]:
    """
    Canonical map of a transaction, keyed by protocol short names.

    Raises:
        EncodingError: If the variant payload does not match the type tag
    """
    if txn.fields is None or txn.fields.TYPE is not txn.type:
        raise EncodingError(f"payload does not match transaction type {txn.type.value}")

    fields = {
        "snd": _address(txn.sender),
        "type": txn.type.value,
        "fee": txn.fee,
        "fv": txn.first_valid,
        "lv": txn.last_valid,
        "gh": _digest(txn.genesis_hash),
        "gen": txn.genesis_id,
        "note": txn.note,
        "grp": _digest(txn.group),
        "rekey": _address(txn.rekey_to),
        "lx": _digest(txn.lease),
    }
    fields.update(_VARIANT_ENCODERS[txn.type](txn.fields))
    return canonicalize(fields)


def encode_transaction(txn: Transaction) -> bytes:
    """Canonical bytes of a transaction."""
    return pack_canonical(transaction_to_dict(txn))


def signing_payload(canonical: bytes) -> bytes:
    """Bytes covered by a transaction signature."""
    return TXID_PREFIX + canonical


def raw_transaction_id(canonical: bytes) -> bytes:
    """32-byte transaction id digest of canonical transaction bytes."""
    return sha512_256(signing_payload(canonical))


def transaction_id(txn: Transaction) -> str:
    """Text transaction id, the same for every signature over the transaction."""
    return encode_base32(raw_transaction_id(encode_transaction(txn)))
