"""
Account addresses.

An address is a 32-byte Ed25519 public key. Its text form is the
unpadded base32 of the key followed by a 4-byte checksum; the checksum is
never part of signed bytes.
"""

import base64
import hashlib
from dataclasses import dataclass, field
from typing import List, Sequence, Union

KEY_LENGTH = 32
CHECKSUM_LENGTH = 4
ADDRESS_LENGTH = 58

MULTISIG_PREFIX = b"MultisigAddr"
PROGRAM_PREFIX = b"Program"


def sha512_256(data: bytes) -> bytes:
    """SHA-512/256 digest, the ledger's hash for ids and checksums."""
    return hashlib.new("sha512_256", data).digest()


def encode_base32(data: bytes) -> str:
    """Unpadded base32, as used for addresses and transaction ids."""
    return base64.b32encode(data).decode("ascii").rstrip("=")


def decode_base32(text: str) -> bytes:
    padding = (-len(text)) % 8
    return base64.b32decode(text + "=" * padding)


@dataclass(frozen=True)
class Address:
    """
    A ledger account identifier.

    Attributes:
        public_key: Raw 32-byte public key
    """

    public_key: bytes

    def __post_init__(self):
        if not isinstance(self.public_key, (bytes, bytearray)):
            raise TypeError("public_key must be bytes")
        if len(self.public_key) != KEY_LENGTH:
            raise ValueError(
                f"public key must be {KEY_LENGTH} bytes, got {len(self.public_key)}"
            )
        object.__setattr__(self, "public_key", bytes(self.public_key))

    @classmethod
    def from_string(cls, text: str) -> "Address":
        """
        Parse a checksummed address string.

        Raises:
            ValueError: If the text is malformed or the checksum does not match
        """
        if len(text) != ADDRESS_LENGTH:
            raise ValueError(f"address must be {ADDRESS_LENGTH} characters: {text!r}")
        try:
            raw = decode_base32(text)
        except ValueError as e:
            raise ValueError(f"address is not valid base32: {text!r}") from e

        public_key, checksum = raw[:KEY_LENGTH], raw[KEY_LENGTH:]
        if checksum != _checksum(public_key):
            raise ValueError(f"address checksum mismatch: {text!r}")
        return cls(public_key)

    @classmethod
    def coerce(cls, value: Union["Address", str, bytes]) -> "Address":
        """Accept an Address, its text form, or raw key bytes."""
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        return cls(value)

    @classmethod
    def zero(cls) -> "Address":
        return cls(bytes(KEY_LENGTH))

    @property
    def is_zero(self) -> bool:
        return self.public_key == bytes(KEY_LENGTH)

    @property
    def checksum(self) -> bytes:
        return _checksum(self.public_key)

    def __str__(self) -> str:
        return encode_base32(self.public_key + self.checksum)

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"


def _checksum(public_key: bytes) -> bytes:
    return sha512_256(public_key)[-CHECKSUM_LENGTH:]


def is_valid_address(text: str) -> bool:
    """Check whether a string is a well-formed, checksummed address."""
    try:
        Address.from_string(text)
    except ValueError:
        return False
    return True


def logic_address(program: bytes) -> Address:
    """Address of the contract account controlled by a compiled program."""
    return Address(sha512_256(PROGRAM_PREFIX + program))


@dataclass(frozen=True)
class MultisigAccount:
    """
    A k-of-n multisignature account.

    The ordering of public keys is significant: it is part of the
    derived address and of the signature layout.

    Attributes:
        version: Multisig scheme version (currently 1)
        threshold: Number of signatures required
        public_keys: Ordered member public keys
    """

    version: int
    threshold: int
    public_keys: Sequence[bytes] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "public_keys", tuple(bytes(pk) for pk in self.public_keys))
        if self.version != 1:
            raise ValueError(f"unsupported multisig version: {self.version}")
        if not self.public_keys:
            raise ValueError("multisig account needs at least one public key")
        if not 1 <= self.threshold <= len(self.public_keys):
            raise ValueError(
                f"threshold must be between 1 and {len(self.public_keys)}, got {self.threshold}"
            )
        for pk in self.public_keys:
            if len(pk) != KEY_LENGTH:
                raise ValueError(f"multisig public keys must be {KEY_LENGTH} bytes")

    @classmethod
    def from_addresses(
        cls,
        version: int,
        threshold: int,
        addresses: List[Union[Address, str]],
    ) -> "MultisigAccount":
        keys = [Address.coerce(a).public_key for a in addresses]
        return cls(version, threshold, keys)

    def address(self) -> Address:
        """Derive the account address from version, threshold and keys."""
        data = MULTISIG_PREFIX + bytes([self.version, self.threshold])
        data += b"".join(self.public_keys)
        return Address(sha512_256(data))
