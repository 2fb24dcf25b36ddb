"""
Pytest configuration and shared fixtures for the test suite.
"""

from typing import List, Optional, Union

import msgpack
import pytest

from algotx.config import AlgoTxConfig, NetworkType
from algotx.core.address import Address, encode_base32
from algotx.core.pending import PendingTransactionStatus
from algotx.node.interface import NodeInterface, NodeStatus, SuggestedParams
from algotx.tx.asset_config import AssetConfigTransactionBuilder
from algotx.tx.encoding import raw_transaction_id

from helpers import TESTNET_GENESIS_HASH, TESTNET_GENESIS_ID, make_address, with_common_fields


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> AlgoTxConfig:
    """Create a test configuration with fast polling."""
    return AlgoTxConfig(
        network=NetworkType.LOCAL,
        algod_url="http://algod.test",
        algod_token="test-token",
        poll_interval_seconds=0.001,
        poll_backoff_factor=1.0,
        poll_max_interval_seconds=0.001,
        validity_rounds=100,
        log_level="DEBUG",
    )


# ============================================================================
# Test Data
# ============================================================================

@pytest.fixture
def sender() -> Address:
    return make_address(1)


@pytest.fixture
def receiver() -> Address:
    return make_address(2)


@pytest.fixture
def asset_creation_builder(sender) -> AssetConfigTransactionBuilder:
    """Asset creation builder with every required field set."""
    builder = with_common_fields(AssetConfigTransactionBuilder(), sender)
    builder.total(1_000_000).decimals(2).unit_name("USD").asset_name("Dollar")
    builder.manager(sender).reserve(sender)
    return builder


# ============================================================================
# Mock Node Interface
# ============================================================================

StatusScript = Union[PendingTransactionStatus, None, Exception]


class MockNodeInterface(NodeInterface):
    """
    Mock node interface for testing.

    Status polls and round queries replay scripted responses; the last
    entry repeats once the script runs out.
    """

    def __init__(self):
        self.statuses: List[StatusScript] = [None]
        self.rounds: List[Union[int, Exception]] = [1000]
        self.params = SuggestedParams(
            fee=0,
            min_fee=1000,
            last_round=1000,
            genesis_id=TESTNET_GENESIS_ID,
            genesis_hash=TESTNET_GENESIS_HASH,
            consensus_version="future",
        )
        self.submitted: List[bytes] = []
        self.poll_count = 0
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def get_suggested_params(self) -> SuggestedParams:
        return self.params

    async def get_status(self) -> NodeStatus:
        item = self.rounds.pop(0) if len(self.rounds) > 1 else self.rounds[0]
        if isinstance(item, Exception):
            raise item
        return NodeStatus(last_round=item)

    async def submit_raw_transaction(self, data: bytes) -> str:
        self.submitted.append(data)
        envelope = msgpack.unpackb(data, raw=False)
        canonical = msgpack.packb(envelope["txn"], use_bin_type=True)
        return encode_base32(raw_transaction_id(canonical))

    async def pending_transaction_info(self, txid: str) -> Optional[PendingTransactionStatus]:
        self.poll_count += 1
        item = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def mock_node() -> MockNodeInterface:
    """Create a mock node interface."""
    return MockNodeInterface()


# ============================================================================
# Test Signer
# ============================================================================

@pytest.fixture
def test_signer(test_config):
    """Create a test signer with a random key."""
    from algotx.tx.signer import generate_test_key
    return generate_test_key(test_config)
