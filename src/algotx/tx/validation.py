"""
Transaction validation.

Common fields are checked first, in a fixed order, then the variant
payload is checked by the validator registered for its type tag. The
first violated invariant raises ValidationError, so failure messages are
reproducible for a given input.
"""

from typing import Callable, Dict, Optional, Sequence

from algotx.core.transaction import (
    HASH_LENGTH,
    LEASE_LENGTH,
    MAX_APP_ACCOUNTS,
    MAX_APP_ARGS,
    MAX_APP_TOTAL_REFERENCES,
    MAX_ASSET_DECIMALS,
    MAX_ASSET_NAME_LENGTH,
    MAX_EXTRA_PROGRAM_PAGES,
    MAX_NOTE_LENGTH,
    MAX_UINT64,
    MAX_UNIT_NAME_LENGTH,
    MAX_URL_LENGTH,
    METADATA_HASH_LENGTH,
    SELECTION_KEY_LENGTH,
    STATE_PROOF_KEY_LENGTH,
    VOTE_KEY_LENGTH,
    ApplicationCallFields,
    AssetConfigFields,
    AssetFreezeFields,
    AssetTransferFields,
    KeyRegistrationFields,
    OnComplete,
    PaymentFields,
    Transaction,
    TransactionType,
    is_unset,
)
from algotx.exceptions import ValidationError

_VARIANT_VALIDATORS: Dict[TransactionType, Callable] = {}


def _validator(txn_type: TransactionType) -> Callable:
    def register(func: Callable) -> Callable:
        _VARIANT_VALIDATORS[txn_type] = func
        return func
    return register


def _require(value, field: str, message: Optional[str] = None) -> None:
    if value is None:
        raise ValidationError(message or f"{field} is required", field=field)


def _check_uint(value: Optional[int], field: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if value < 0:
        raise ValidationError(f"{field} must be non-negative, got {value}", field=field)
    if value > MAX_UINT64:
        raise ValidationError(f"{field} exceeds the uint64 range: {value}", field=field)


def _check_bytes(
    value: Optional[bytes],
    field: str,
    exact: Optional[int] = None,
    maximum: Optional[int] = None,
) -> None:
    if value is None:
        return
    if exact is not None and len(value) != exact:
        raise ValidationError(
            f"{field} must be exactly {exact} bytes, got {len(value)}", field=field
        )
    if maximum is not None and len(value) > maximum:
        raise ValidationError(
            f"{field} must be at most {maximum} bytes, got {len(value)}", field=field
        )


def _check_text(value: Optional[str], field: str, maximum: int) -> None:
    if value is None:
        return
    _check_bytes(value.encode("utf-8"), field, maximum=maximum)


def validate_transaction(txn: Transaction) -> None:
    """
    Validate a transaction record.

    Raises:
        ValidationError: Naming the first violated invariant
    """
    _require(txn.sender, "sender")
    if txn.fields is None or txn.fields.TYPE is not txn.type:
        raise ValidationError(
            f"payload does not match transaction type {txn.type.value}", field="type"
        )

    _require(txn.fee, "fee")
    _check_uint(txn.fee, "fee")

    _require(txn.first_valid, "first_valid")
    _check_uint(txn.first_valid, "first_valid")
    _require(txn.last_valid, "last_valid")
    _check_uint(txn.last_valid, "last_valid")
    if txn.first_valid > txn.last_valid:
        raise ValidationError(
            f"first_valid ({txn.first_valid}) must not exceed last_valid ({txn.last_valid})",
            field="first_valid",
        )

    _require(txn.genesis_hash, "genesis_hash")
    _check_bytes(txn.genesis_hash, "genesis_hash", exact=HASH_LENGTH)

    _check_bytes(txn.note, "note", maximum=MAX_NOTE_LENGTH)
    _check_bytes(txn.lease, "lease", exact=LEASE_LENGTH)
    _check_bytes(txn.group, "group", exact=HASH_LENGTH)

    _VARIANT_VALIDATORS[txn.type](txn.fields)


@_validator(TransactionType.PAYMENT)
def _validate_payment(fields: PaymentFields) -> None:
    _require(fields.receiver, "receiver")
    _check_uint(fields.amount, "amount")


@_validator(TransactionType.ASSET_CONFIG)
def _validate_asset_config(fields: AssetConfigFields) -> None:
    _check_uint(fields.asset_id, "asset_id")

    if fields.destroy:
        configured = fields.configured_fields()
        if configured:
            raise ValidationError(
                f"destroy conflicts with configuration fields: {', '.join(configured)}",
                field=configured[0],
            )
        if fields.is_creation:
            raise ValidationError(
                "destroy requires the asset_id of an existing asset", field="asset_id"
            )
        return

    if fields.is_creation:
        if fields.total is None or fields.decimals is None:
            raise ValidationError(
                "total and decimals required on creation",
                field="total" if fields.total is None else "decimals",
            )
        _check_uint(fields.total, "total")
        _check_uint(fields.decimals, "decimals")
        if fields.decimals > MAX_ASSET_DECIMALS:
            raise ValidationError(
                f"decimals must be between 0 and {MAX_ASSET_DECIMALS}, got {fields.decimals}",
                field="decimals",
            )
        _check_text(fields.unit_name, "unit_name", MAX_UNIT_NAME_LENGTH)
        _check_text(fields.asset_name, "asset_name", MAX_ASSET_NAME_LENGTH)
        _check_text(fields.url, "url", MAX_URL_LENGTH)
        if not is_unset(fields.metadata_hash):
            _check_bytes(fields.metadata_hash, "metadata_hash", exact=METADATA_HASH_LENGTH)
        return

    for name in fields.configured_fields():
        if name in AssetConfigFields.CREATION_FIELDS:
            raise ValidationError(f"{name} cannot be changed after creation", field=name)

    # An asset configuration without parameters destroys the asset.
    roles = [getattr(fields, name) for name in AssetConfigFields.ROLE_FIELDS]
    if all(is_unset(role) for role in roles):
        raise ValidationError(
            "reconfiguration must keep at least one role address; use destroy to remove the asset",
            field="manager",
        )


@_validator(TransactionType.ASSET_TRANSFER)
def _validate_asset_transfer(fields: AssetTransferFields) -> None:
    _require(fields.asset_id, "asset_id")
    _check_uint(fields.asset_id, "asset_id")
    if fields.asset_id == 0:
        raise ValidationError("asset_id must identify an existing asset", field="asset_id")
    _check_uint(fields.amount, "amount")
    _require(fields.receiver, "receiver")


@_validator(TransactionType.ASSET_FREEZE)
def _validate_asset_freeze(fields: AssetFreezeFields) -> None:
    _require(fields.asset_id, "asset_id")
    _check_uint(fields.asset_id, "asset_id")
    if fields.asset_id == 0:
        raise ValidationError("asset_id must identify an existing asset", field="asset_id")
    _require(fields.target, "target")


@_validator(TransactionType.KEY_REGISTRATION)
def _validate_key_registration(fields: KeyRegistrationFields) -> None:
    online = [name for name in KeyRegistrationFields.ONLINE_FIELDS if getattr(fields, name) is not None]

    if fields.non_participation and (online or fields.state_proof_key is not None):
        raise ValidationError(
            "non_participation cannot be combined with participation keys",
            field="non_participation",
        )

    if online and len(online) != len(KeyRegistrationFields.ONLINE_FIELDS):
        missing = [name for name in KeyRegistrationFields.ONLINE_FIELDS if name not in online]
        raise ValidationError(
            f"going online requires all participation fields, missing: {', '.join(missing)}",
            field=missing[0],
        )

    _check_bytes(fields.vote_key, "vote_key", exact=VOTE_KEY_LENGTH)
    _check_bytes(fields.selection_key, "selection_key", exact=SELECTION_KEY_LENGTH)
    _check_bytes(fields.state_proof_key, "state_proof_key", exact=STATE_PROOF_KEY_LENGTH)
    _check_uint(fields.vote_first, "vote_first")
    _check_uint(fields.vote_last, "vote_last")
    _check_uint(fields.vote_key_dilution, "vote_key_dilution")
    if online and fields.vote_first > fields.vote_last:
        raise ValidationError(
            f"vote_first ({fields.vote_first}) must not exceed vote_last ({fields.vote_last})",
            field="vote_first",
        )


def _check_count(items: Sequence, field: str, maximum: int) -> None:
    if len(items) > maximum:
        raise ValidationError(f"{field} allows at most {maximum} entries, got {len(items)}", field=field)


@_validator(TransactionType.APPLICATION_CALL)
def _validate_application_call(fields: ApplicationCallFields) -> None:
    _check_uint(fields.app_id, "app_id")

    if fields.is_creation:
        _require(fields.approval_program, "approval_program",
                 "approval_program and clear_program required on creation")
        _require(fields.clear_program, "clear_program",
                 "approval_program and clear_program required on creation")
    else:
        for name in ("global_schema", "local_schema", "extra_pages"):
            if getattr(fields, name) is not None:
                raise ValidationError(f"{name} can only be set on creation", field=name)
        if fields.on_complete is not OnComplete.UPDATE_APPLICATION:
            for name in ("approval_program", "clear_program"):
                if getattr(fields, name) is not None:
                    raise ValidationError(
                        f"{name} can only be set on creation or update", field=name
                    )

    for schema_name in ("global_schema", "local_schema"):
        schema = getattr(fields, schema_name)
        if schema is not None:
            _check_uint(schema.num_uints, f"{schema_name}.num_uints")
            _check_uint(schema.num_byte_slices, f"{schema_name}.num_byte_slices")

    _check_uint(fields.extra_pages, "extra_pages")
    if fields.extra_pages is not None and fields.extra_pages > MAX_EXTRA_PROGRAM_PAGES:
        raise ValidationError(
            f"extra_pages must be at most {MAX_EXTRA_PROGRAM_PAGES}, got {fields.extra_pages}",
            field="extra_pages",
        )

    _check_count(fields.app_args, "app_args", MAX_APP_ARGS)
    _check_count(fields.accounts, "accounts", MAX_APP_ACCOUNTS)
    references = len(fields.accounts) + len(fields.foreign_apps) + len(fields.foreign_assets)
    if references > MAX_APP_TOTAL_REFERENCES:
        raise ValidationError(
            f"accounts, foreign_apps and foreign_assets allow at most "
            f"{MAX_APP_TOTAL_REFERENCES} references combined, got {references}",
            field="accounts",
        )
    for index, app_id in enumerate(fields.foreign_apps):
        _check_uint(app_id, f"foreign_apps[{index}]")
    for index, asset_id in enumerate(fields.foreign_assets):
        _check_uint(asset_id, f"foreign_assets[{index}]")
