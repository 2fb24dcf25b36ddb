"""
algod REST adapter for node integration.

Provides network access through an algod node's v2 REST API.
"""

import base64
from typing import Any, Optional

import httpx
import structlog

from algotx.config import AlgoTxConfig, get_config
from algotx.core.pending import PendingTransactionStatus
from algotx.exceptions import NodeConnectionError, PollError, SubmissionError
from algotx.node.interface import NodeInterface, NodeStatus, SuggestedParams

logger = structlog.get_logger(__name__)

TOKEN_HEADER = "X-Algo-API-Token"


class AlgodAdapter(NodeInterface):
    """
    algod API adapter.

    Implements the NodeInterface using algod's REST API.
    """

    def __init__(
        self,
        config: Optional[AlgoTxConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the algod adapter.

        Args:
            config: Configuration. Uses global config if not provided.
            transport: Custom httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.config = config or get_config()
        self.base_url = self.config.node_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> dict:
        """Get request headers with API token."""
        headers = {"Accept": "application/json"}
        token = self.config.algod_token.get_secret_value()
        if token:
            headers[TOKEN_HEADER] = token
        return headers

    async def connect(self) -> None:
        """Establish connection (create HTTP client)."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.config.request_timeout_seconds,
            transport=self._transport,
        )

        # Test connection
        try:
            response = await self._client.get("/health")
        except httpx.RequestError as e:
            await self.disconnect()
            raise NodeConnectionError(f"Failed to connect to algod: {e}")
        if response.status_code != 200:
            await self.disconnect()
            raise NodeConnectionError(f"algod health check failed: {response.text}")
        logger.info("algod_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("algod_disconnected")

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type = NodeConnectionError,
        **kwargs,
    ) -> Optional[Any]:
        """Make an API request. Returns None on 404."""
        if not self._client:
            await self.connect()

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error("algod_request_error", path=path, error=str(e))
            raise error_cls(f"algod request failed: {e}")

        if response.status_code == 404:
            return None

        if response.status_code != 200:
            error_msg = _error_message(response)
            logger.error(
                "algod_request_failed",
                path=path,
                status=response.status_code,
                error=error_msg,
            )
            raise error_cls(f"algod API error: {error_msg}")

        return response.json()

    async def get_suggested_params(self) -> SuggestedParams:
        """Get suggested transaction parameters."""
        data = await self._request("GET", "/v2/transactions/params")
        if data is None:
            raise NodeConnectionError("algod did not return transaction parameters")

        return SuggestedParams(
            fee=int(data["fee"]),
            min_fee=int(data["min-fee"]),
            last_round=int(data["last-round"]),
            genesis_id=data["genesis-id"],
            genesis_hash=base64.b64decode(data["genesis-hash"]),
            consensus_version=data.get("consensus-version", ""),
        )

    async def get_status(self) -> NodeStatus:
        """Get current node status."""
        data = await self._request("GET", "/v2/status", error_cls=PollError)
        if data is None:
            raise PollError("algod did not return node status")

        return NodeStatus(
            last_round=int(data["last-round"]),
            time_since_last_round_ns=int(data.get("time-since-last-round", 0)),
            catchup_time_ns=int(data.get("catchup-time", 0)),
            last_version=data.get("last-version", ""),
        )

    async def submit_raw_transaction(self, data: bytes) -> str:
        """Submit encoded signed transaction bytes."""
        if not self._client:
            await self.connect()

        try:
            response = await self._client.post(
                "/v2/transactions",
                content=data,
                headers={"Content-Type": "application/x-binary"},
            )
        except httpx.RequestError as e:
            raise SubmissionError(f"Transaction submission request failed: {e}")

        if response.status_code != 200:
            error_msg = _error_message(response)
            logger.error("tx_submit_failed", status=response.status_code, error=error_msg)
            raise SubmissionError(error_msg, error_code=str(response.status_code))

        txid = response.json()["txId"]
        logger.info("tx_submitted", txid=txid, size=len(data))
        return txid

    async def pending_transaction_info(self, txid: str) -> Optional[PendingTransactionStatus]:
        """Get the node's view of a pending transaction."""
        data = await self._request(
            "GET",
            f"/v2/transactions/pending/{txid}",
            error_cls=PollError,
            params={"format": "json"},
        )
        if data is None:
            logger.debug("pending_tx_not_found", txid=txid)
            return None

        return PendingTransactionStatus.from_response(txid, data)


def _error_message(response: httpx.Response) -> str:
    # algod reports errors as {"message": "..."}; keep the text verbatim.
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.text
