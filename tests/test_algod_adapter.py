"""
Test suite for the algod REST adapter.

Requests are served by an in-process httpx.MockTransport.
"""

import base64

import httpx
import pytest

from algotx.exceptions import NodeConnectionError, PollError, SubmissionError
from algotx.node.algod import TOKEN_HEADER, AlgodAdapter

from helpers import TESTNET_GENESIS_HASH, generate_test_txid


TXID = generate_test_txid(3)


def make_transport(routes, seen=None):
    """Build a transport answering (method, path) with (status, json body)."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        key = (request.method, request.url.path)
        if key not in routes:
            return httpx.Response(404, json={"message": "not found"})
        status, body = routes[key]
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


HEALTH = {("GET", "/health"): (200, None)}


# ============================================================================
# Test Connection
# ============================================================================

class TestConnection:
    """Tests for connecting to algod."""

    @pytest.mark.asyncio
    async def test_connect_sends_token(self, test_config):
        seen = []
        adapter = AlgodAdapter(test_config, transport=make_transport(HEALTH, seen))

        await adapter.connect()
        await adapter.disconnect()

        assert seen[0].headers[TOKEN_HEADER] == "test-token"
        assert str(seen[0].url) == "http://algod.test/health"

    @pytest.mark.asyncio
    async def test_failed_health_check(self, test_config):
        routes = {("GET", "/health"): (500, {"message": "catching up"})}
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        with pytest.raises(NodeConnectionError):
            await adapter.connect()


# ============================================================================
# Test Endpoints
# ============================================================================

class TestEndpoints:
    """Tests for the individual REST calls."""

    @pytest.mark.asyncio
    async def test_suggested_params(self, test_config):
        routes = dict(HEALTH)
        routes[("GET", "/v2/transactions/params")] = (
            200,
            {
                "consensus-version": "future",
                "fee": 0,
                "genesis-hash": base64.b64encode(TESTNET_GENESIS_HASH).decode(),
                "genesis-id": "testnet-v1.0",
                "last-round": 4999,
                "min-fee": 1000,
            },
        )
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        params = await adapter.get_suggested_params()

        assert params.last_round == 4999
        assert params.min_fee == 1000
        assert params.genesis_hash == TESTNET_GENESIS_HASH
        assert params.genesis_id == "testnet-v1.0"
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_current_round(self, test_config):
        routes = dict(HEALTH)
        routes[("GET", "/v2/status")] = (200, {"last-round": 777, "time-since-last-round": 5})
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        assert await adapter.get_current_round() == 777
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_submit(self, test_config):
        seen = []
        routes = dict(HEALTH)
        routes[("POST", "/v2/transactions")] = (200, {"txId": TXID})
        adapter = AlgodAdapter(test_config, transport=make_transport(routes, seen))

        txid = await adapter.submit_raw_transaction(b"\x82\xa3sig")

        assert txid == TXID
        assert seen[-1].headers["Content-Type"] == "application/x-binary"
        assert seen[-1].content == b"\x82\xa3sig"
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_submit_rejected_keeps_message(self, test_config):
        message = "TransactionPool.Remember: transaction already in ledger"
        routes = dict(HEALTH)
        routes[("POST", "/v2/transactions")] = (400, {"message": message})
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        with pytest.raises(SubmissionError) as exc:
            await adapter.submit_raw_transaction(b"\x80")

        assert str(exc.value) == message
        assert exc.value.error_code == "400"
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_pending_info(self, test_config):
        routes = dict(HEALTH)
        routes[("GET", f"/v2/transactions/pending/{TXID}")] = (
            200,
            {"confirmed-round": 5000001, "pool-error": "", "asset-index": 12},
        )
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        status = await adapter.pending_transaction_info(TXID)

        assert status.txid == TXID
        assert status.confirmed_round == 5000001
        assert status.asset_index == 12
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_pending_info_not_found(self, test_config):
        adapter = AlgodAdapter(test_config, transport=make_transport(dict(HEALTH)))

        assert await adapter.pending_transaction_info(TXID) is None
        await adapter.disconnect()

    @pytest.mark.asyncio
    async def test_pending_info_server_error_is_poll_error(self, test_config):
        routes = dict(HEALTH)
        routes[("GET", f"/v2/transactions/pending/{TXID}")] = (503, {"message": "busy"})
        adapter = AlgodAdapter(test_config, transport=make_transport(routes))

        with pytest.raises(PollError, match="busy"):
            await adapter.pending_transaction_info(TXID)
        await adapter.disconnect()
