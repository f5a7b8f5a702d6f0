"""Chain directory client (``/networks`` endpoints)."""

import logging

from crossbridge.api.base import APIClient
from crossbridge.networks.models import Network, Token

logger = logging.getLogger(__name__)


class NetworksClient(APIClient):
    """HTTP implementation of the networks API."""

    async def connected(self) -> list[Network]:
        """Get the chains connected to the bridge."""
        response = await self._get("/networks")
        networks = self._json(response) or []
        return [Network.model_validate(network) for network in networks]

    async def supported_tokens(self, network_id: int) -> list[Token]:
        """Get the tokens supported on a chain."""
        response = await self._get(f"/networks/{network_id}/supported-tokens")
        tokens = self._json(response) or []
        return [Token.model_validate(token) for token in tokens]
