"""
Transaction Signer - handles transaction signing.

Produces detached Ed25519 signatures over the canonical transaction bytes
and wraps them into a signed envelope. An envelope carries exactly one
authorization: a single signature, a multisig signature set, or a logic
signature.
"""

import base64
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

import msgpack
import nacl.exceptions
import nacl.signing
import structlog

from algotx.config import AlgoTxConfig, get_config
from algotx.core.address import (
    PROGRAM_PREFIX,
    Address,
    MultisigAccount,
    encode_base32,
    logic_address,
)
from algotx.core.transaction import Transaction
from algotx.exceptions import SigningError
from algotx.tx.encoding import (
    canonicalize,
    encode_transaction,
    raw_transaction_id,
    signing_payload,
)

logger = structlog.get_logger(__name__)

SEED_LENGTH = 32
PRIVATE_KEY_LENGTH = 64


@dataclass(frozen=True)
class SingleSignature:
    """Signature by one Ed25519 key."""
    signature: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"sig": self.signature}


@dataclass(frozen=True)
class MultisigSubsig:
    """One member slot of a multisig signature; signature None until signed."""
    public_key: bytes
    signature: Optional[bytes] = None


@dataclass(frozen=True)
class MultisigSignature:
    """
    Signature set of a multisig account.

    Subsignatures follow the account's key order, signed or not.
    """
    version: int
    threshold: int
    subsigs: Tuple[MultisigSubsig, ...] = field(default_factory=tuple)

    @classmethod
    def for_account(cls, account: MultisigAccount) -> "MultisigSignature":
        return cls(
            version=account.version,
            threshold=account.threshold,
            subsigs=tuple(MultisigSubsig(pk) for pk in account.public_keys),
        )

    def account(self) -> MultisigAccount:
        return MultisigAccount(
            self.version,
            self.threshold,
            [subsig.public_key for subsig in self.subsigs],
        )

    @property
    def signature_count(self) -> int:
        return sum(1 for subsig in self.subsigs if subsig.signature is not None)

    @property
    def is_complete(self) -> bool:
        return self.signature_count >= self.threshold

    def with_signature(self, public_key: bytes, signature: bytes) -> "MultisigSignature":
        """
        Return a copy with one member slot for public_key signed.

        A key listed more than once fills its first unsigned slot; each
        further signature fills the next one.
        """
        slots = [i for i, subsig in enumerate(self.subsigs) if subsig.public_key == public_key]
        if not slots:
            raise SigningError("key is not a member of the multisig account")
        unsigned = [i for i in slots if self.subsigs[i].signature is None]
        index = unsigned[0] if unsigned else slots[0]

        subsigs = list(self.subsigs)
        subsigs[index] = MultisigSubsig(public_key, signature)
        return replace(self, subsigs=tuple(subsigs))

    def merge(self, other: "MultisigSignature") -> "MultisigSignature":
        """Combine the signatures of two partial sets over the same account."""
        if self.account() != other.account():
            raise SigningError("cannot merge signatures of different multisig accounts")

        subsigs = []
        for mine, theirs in zip(self.subsigs, other.subsigs):
            if mine.signature and theirs.signature and mine.signature != theirs.signature:
                raise SigningError("conflicting signatures for the same multisig member")
            subsigs.append(MultisigSubsig(mine.public_key, mine.signature or theirs.signature))
        return replace(self, subsigs=tuple(subsigs))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msig": {
                "subsig": [
                    {"pk": subsig.public_key, "s": subsig.signature}
                    for subsig in self.subsigs
                ],
                "thr": self.threshold,
                "v": self.version,
            }
        }


@dataclass(frozen=True)
class LogicSignature:
    """
    Authorization by a compiled program.

    Without a delegation the program's own contract account is the
    authorizer. With one, an account has signed the program and lets it
    approve transactions on its behalf.
    """
    program: bytes
    args: Tuple[bytes, ...] = ()
    delegation: Optional[Union[SingleSignature, MultisigSignature]] = None

    def address(self) -> Address:
        """Contract account address of the program."""
        return logic_address(self.program)

    def to_dict(self) -> Dict[str, Any]:
        lsig = {"l": self.program, "arg": list(self.args)}
        if self.delegation is not None:
            lsig.update(self.delegation.to_dict())
        return {"lsig": lsig}


Authorization = Union[SingleSignature, MultisigSignature, LogicSignature]


@dataclass(frozen=True)
class SignedTransaction:
    """
    A transaction together with its authorization.

    Attributes:
        transaction: The signed transaction record
        canonical: Canonical bytes the signature covers, kept verbatim
        authorization: The one authorization of this envelope
        auth_address: Authorizing address when it differs from the sender
    """

    transaction: Transaction
    canonical: bytes
    authorization: Authorization
    auth_address: Optional[Address] = None

    @property
    def txid(self) -> str:
        """Transaction id; independent of the authorization."""
        return encode_base32(raw_transaction_id(self.canonical))

    def encode(self) -> bytes:
        """
        Canonical envelope bytes for submission.

        The transaction is embedded as its original canonical bytes.
        """
        entries = canonicalize(self.authorization.to_dict())
        if self.auth_address is not None:
            entries["sgnr"] = self.auth_address.public_key

        packer = msgpack.Packer(use_bin_type=True)
        out = [packer.pack_map_header(len(entries) + 1)]
        for key in sorted(list(entries) + ["txn"]):
            out.append(packer.pack(key))
            out.append(self.canonical if key == "txn" else packer.pack(entries[key]))
        return b"".join(out)


def _authorizer(sender: Optional[Address], address: Address) -> Optional[Address]:
    # The authorizing address is recorded only for rekeyed senders.
    return None if address == sender else address


class TransactionSigner:
    """
    Handles transaction signing with one Ed25519 key.

    Supports loading keys from:
    - File path (base64 private key on a single line)
    - Base64 private key (for environment variable configuration)

    A private key is the 64-byte seed-and-public-key form or a bare
    32-byte seed.
    """

    def __init__(self, config: Optional[AlgoTxConfig] = None):
        """
        Initialize the transaction signer.

        Args:
            config: Configuration; uses the global config if not provided
        """
        self.config = config or get_config()
        self._signing_key: Optional[nacl.signing.SigningKey] = None
        self._address: Optional[Address] = None

    def load_key_from_file(self, key_path: str) -> None:
        """
        Load signing key from a file.

        Args:
            key_path: Path to a file holding the base64 private key
        """
        path = Path(key_path)
        if not path.exists():
            raise SigningError(f"Signing key file not found: {key_path}")

        self.load_key_from_b64(path.read_text().strip())
        logger.info("signing_key_loaded", path=key_path, address=str(self._address))

    def load_key_from_b64(self, key_b64: str) -> None:
        """
        Load signing key from base64 text.

        Args:
            key_b64: Base64 private key (64 bytes) or seed (32 bytes)
        """
        try:
            raw = base64.b64decode(key_b64, validate=True)
        except ValueError as e:
            raise SigningError("Signing key is not valid base64") from e
        self.load_key(raw)

    def load_key(self, raw: bytes) -> None:
        """Load signing key from raw private key or seed bytes."""
        if len(raw) not in (SEED_LENGTH, PRIVATE_KEY_LENGTH):
            raise SigningError(
                f"Signing key must be {SEED_LENGTH} or {PRIVATE_KEY_LENGTH} bytes, got {len(raw)}"
            )

        signing_key = nacl.signing.SigningKey(raw[:SEED_LENGTH])
        public_key = bytes(signing_key.verify_key)
        if len(raw) == PRIVATE_KEY_LENGTH and raw[SEED_LENGTH:] != public_key:
            raise SigningError("Private key does not match its embedded public key")

        self._signing_key = signing_key
        self._address = Address(public_key)

    def load_from_config(self) -> None:
        """Load signing key from configuration."""
        if self.config.signing_key_path:
            self.load_key_from_file(self.config.signing_key_path)
        elif self.config.signing_key_b64:
            self.load_key_from_b64(self.config.signing_key_b64.get_secret_value())
            logger.info("signing_key_loaded_from_config", address=str(self._address))
        else:
            raise SigningError("No signing key configured")

    @property
    def address(self) -> Optional[Address]:
        """Get the signer's address."""
        return self._address

    @property
    def address_str(self) -> Optional[str]:
        return str(self._address) if self._address else None

    @property
    def is_loaded(self) -> bool:
        """Check if a signing key is loaded."""
        return self._signing_key is not None

    def export_private_key(self) -> str:
        """Base64 of the 64-byte seed-and-public-key private key."""
        if not self._signing_key:
            raise SigningError("No signing key loaded")
        raw = bytes(self._signing_key) + self._address.public_key
        return base64.b64encode(raw).decode("ascii")

    def sign_bytes(self, data: bytes) -> bytes:
        """
        Produce a detached signature.

        Raises:
            SigningError: If no key is loaded or signing fails
        """
        if not self._signing_key:
            raise SigningError("No signing key loaded")
        try:
            return self._signing_key.sign(data).signature
        except nacl.exceptions.CryptoError as e:
            raise SigningError(f"Signing failed: {e}") from e

    def sign_transaction(self, txn: Transaction) -> SignedTransaction:
        """
        Sign a transaction with this key.

        Args:
            txn: Transaction to sign

        Returns:
            Signed envelope with a single signature
        """
        canonical = encode_transaction(txn)
        signature = self.sign_bytes(signing_payload(canonical))

        signed = SignedTransaction(
            transaction=txn,
            canonical=canonical,
            authorization=SingleSignature(signature),
            auth_address=_authorizer(txn.sender, self._address),
        )
        logger.debug("transaction_signed", txid=signed.txid, signer=str(self._address))
        return signed

    def sign_multisig(
        self,
        txn: Transaction,
        account: MultisigAccount,
        partial: Optional[SignedTransaction] = None,
    ) -> SignedTransaction:
        """
        Add this key's signature to a multisig envelope.

        Args:
            txn: Transaction to sign
            account: Multisig account this key is a member of
            partial: Envelope already carrying other members' signatures

        Returns:
            Envelope with this member's slot signed
        """
        canonical = encode_transaction(txn)
        if partial is not None:
            if partial.canonical != canonical:
                raise SigningError("Partial envelope covers a different transaction")
            if not isinstance(partial.authorization, MultisigSignature):
                raise SigningError("Partial envelope is not multisig-signed")
            msig = partial.authorization
        else:
            msig = MultisigSignature.for_account(account)

        signature = self.sign_bytes(signing_payload(canonical))
        msig = msig.with_signature(self._address.public_key, signature)

        logger.debug(
            "multisig_signed",
            txid=encode_base32(raw_transaction_id(canonical)),
            signatures=msig.signature_count,
            threshold=msig.threshold,
        )
        return SignedTransaction(
            transaction=txn,
            canonical=canonical,
            authorization=msig,
            auth_address=_authorizer(txn.sender, account.address()),
        )

    def sign_logic_sig(
        self,
        program: bytes,
        args: Optional[Sequence[bytes]] = None,
    ) -> LogicSignature:
        """
        Delegate this account's authority to a program.

        Returns:
            LogicSignature usable with sign_with_logic_sig()
        """
        signature = self.sign_bytes(PROGRAM_PREFIX + program)
        return LogicSignature(
            program=program,
            args=tuple(args or ()),
            delegation=SingleSignature(signature),
        )


def sign_with_logic_sig(txn: Transaction, lsig: LogicSignature) -> SignedTransaction:
    """
    Authorize a transaction with a logic signature.

    A contract account program authorizes as its own address; a delegated
    program authorizes as the sender.
    """
    canonical = encode_transaction(txn)
    auth_address = None
    if lsig.delegation is None:
        auth_address = _authorizer(txn.sender, lsig.address())
    elif isinstance(lsig.delegation, MultisigSignature):
        auth_address = _authorizer(txn.sender, lsig.delegation.account().address())

    return SignedTransaction(
        transaction=txn,
        canonical=canonical,
        authorization=lsig,
        auth_address=auth_address,
    )


def merge_multisig(envelopes: Iterable[SignedTransaction]) -> SignedTransaction:
    """
    Merge partially signed multisig envelopes of one transaction.

    Raises:
        SigningError: If the envelopes disagree on transaction or account
    """
    envelopes = list(envelopes)
    if not envelopes:
        raise SigningError("Nothing to merge")

    merged = envelopes[0]
    for other in envelopes[1:]:
        if other.canonical != merged.canonical:
            raise SigningError("Cannot merge envelopes of different transactions")
        if not isinstance(other.authorization, MultisigSignature) or not isinstance(
            merged.authorization, MultisigSignature
        ):
            raise SigningError("Only multisig envelopes can be merged")
        merged = replace(merged, authorization=merged.authorization.merge(other.authorization))
    return merged


def verify_signature(signed: SignedTransaction) -> bool:
    """Check a single-signature envelope against its authorizing key."""
    if not isinstance(signed.authorization, SingleSignature):
        raise SigningError("Only single-signature envelopes can be verified")

    signer = signed.auth_address or signed.transaction.sender
    verify_key = nacl.signing.VerifyKey(signer.public_key)
    try:
        verify_key.verify(signing_payload(signed.canonical), signed.authorization.signature)
    except nacl.exceptions.BadSignatureError:
        return False
    return True


def generate_test_key(config: Optional[AlgoTxConfig] = None) -> TransactionSigner:
    """
    Generate a new random signing key for testing.

    WARNING: Do not use in production. The key is not persisted.

    Returns:
        TransactionSigner with a new random key
    """
    signer = TransactionSigner(config or AlgoTxConfig())
    signer.load_key(bytes(nacl.signing.SigningKey.generate()))

    logger.warning("test_key_generated", address=signer.address_str)

    return signer
