"""
Test data shared by the test modules and conftest.py.
"""

import base64

from algotx.core.address import Address, encode_base32


TESTNET_GENESIS_HASH = base64.b64decode("SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI=")
TESTNET_GENESIS_ID = "testnet-v1.0"


def make_address(index: int = 1) -> Address:
    """Generate a deterministic, non-zero test address."""
    return Address(bytes([index]) * 32)


def generate_test_txid(index: int = 0) -> str:
    """Generate a deterministic test transaction id."""
    return encode_base32(bytes([index]) * 32)


def with_common_fields(builder, sender: Address):
    """Apply a fixed sender, fee, validity window and genesis data."""
    return (
        builder.sender(sender)
        .fee(1000)
        .first_valid(5000)
        .last_valid(6000)
        .genesis_hash(TESTNET_GENESIS_HASH)
        .genesis_id(TESTNET_GENESIS_ID)
    )
