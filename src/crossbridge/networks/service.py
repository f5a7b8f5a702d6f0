"""Chain directory service.

Holds the most recent directory snapshot. Snapshots are replaced wholesale
on every query and never patched in place.
"""

import logging
from typing import Optional

from crossbridge.api.networks import NetworksClient
from crossbridge.networks.models import Network, NetworkType, Token

logger = logging.getLogger(__name__)


class DirectoryError(Exception):
    """Raised when the directory is inconsistent or lacks a requested chain."""
    pass


class NetworksService:
    """Exposes chain and token lookups over the directory client."""

    def __init__(self, client: NetworksClient):
        self.client = client
        self._networks: tuple[Network, ...] = ()
        self._tokens: dict[int, tuple[Token, ...]] = {}

    @property
    def networks(self) -> tuple[Network, ...]:
        """Last fetched chain snapshot."""
        return self._networks

    async def connected(self) -> list[Network]:
        """Fetch connected chains and replace the snapshot."""
        networks = await self.client.connected()
        self._networks = tuple(networks)
        logger.debug(f"Directory refreshed: {[n.name for n in networks]}")
        return list(networks)

    async def supported_tokens(self, network_id: int) -> list[Token]:
        """Fetch the token catalogue of a chain.

        Raises:
            DirectoryError: If token ids are not unique
        """
        tokens = await self.client.supported_tokens(network_id)
        seen: set[int] = set()
        for token in tokens:
            if token.id in seen:
                raise DirectoryError(f"Duplicate token id {token.id} on network {network_id}")
            seen.add(token.id)
        self._tokens[network_id] = tuple(tokens)
        return list(tokens)

    def find_network(self, network_id: int) -> Network:
        """Resolve a chain by id in the current snapshot.

        Raises:
            DirectoryError: If the chain is not in the snapshot
        """
        for network in self._networks:
            if network.id == network_id:
                return network
        raise DirectoryError(f"Network {network_id} is not connected")

    async def get_network(self, network_id: int) -> Network:
        """Resolve a chain by id, refreshing the snapshot."""
        await self.connected()
        return self.find_network(network_id)

    async def get_network_by_type(self, network_type: NetworkType) -> Network:
        """Resolve the first chain of a type, refreshing the snapshot."""
        networks = await self.connected()
        for network in networks:
            if network.type == network_type:
                return network
        raise DirectoryError(f"No connected network of type {network_type.value}")

    async def default_token(self, network_id: int, token_id: Optional[int] = None) -> Token:
        """Resolve a token on a chain; the first listed token by default."""
        tokens = await self.supported_tokens(network_id)
        if not tokens:
            raise DirectoryError(f"Network {network_id} has no supported tokens")
        if token_id is None:
            return tokens[0]
        for token in tokens:
            if token.id == token_id:
                return token
        raise DirectoryError(f"Token {token_id} is not supported on network {network_id}")
