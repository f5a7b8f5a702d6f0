"""Deploy relay client.

Signed Casper deploys are not sent to the node directly: the relay takes the
deploy JSON together with the node address and submits it.
"""

import json
import logging
from typing import Optional

import httpx

from crossbridge.api.base import APIClient
from crossbridge.config import Settings, get_settings

logger = logging.getLogger(__name__)


class CasperRelayClient(APIClient):
    """HTTP client for the ``/bridge-in`` and ``/transfer-out`` relay endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        super().__init__(base_url or settings.get_relay_url(), client=client, settings=settings)

    async def bridge_in(self, deploy: dict, rpc_node_address: str) -> None:
        """Relay a signed bridge-in deploy."""
        await self._send("/bridge-in", deploy, rpc_node_address)

    async def transfer_out(self, deploy: dict, rpc_node_address: str) -> None:
        """Relay a signed transfer-out deploy."""
        await self._send("/transfer-out", deploy, rpc_node_address)

    async def _send(self, path: str, deploy: dict, rpc_node_address: str) -> None:
        payload = {"deploy": json.dumps(deploy), "rpcNodeAddress": rpc_node_address}
        await self._post(path, json=payload)
        logger.info(f"Deploy relayed via {path} to {rpc_node_address}")
