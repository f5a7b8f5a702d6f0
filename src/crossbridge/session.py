"""Wallet session state.

Tracks which wallets are connected, the ownership signatures used to query
history, and the chosen sender/recipient chains. Populated on a successful
connect, cleared on disconnect or logout.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from crossbridge.networks.models import NetworkType

logger = logging.getLogger(__name__)


@dataclass
class WalletConnection:
    """Connection record for one wallet family."""
    address: str
    signature: Optional[str] = None
    public_key: Optional[str] = None


@dataclass
class SessionState:
    """Explicit session state shared by wallets and the orchestrator."""

    sender_network_id: Optional[int] = None
    recipient_network_id: Optional[int] = None
    connections: dict[NetworkType, WalletConnection] = field(default_factory=dict)

    def mark_connected(
        self,
        network_type: NetworkType,
        address: str,
        signature: Optional[str] = None,
        public_key: Optional[str] = None,
    ) -> WalletConnection:
        """Record a successful wallet connection."""
        connection = WalletConnection(address=address, signature=signature, public_key=public_key)
        self.connections[network_type] = connection
        logger.info(f"Session: {network_type.value} wallet connected")
        return connection

    def is_connected(self, network_type: NetworkType) -> bool:
        return network_type in self.connections

    def get(self, network_type: NetworkType) -> Optional[WalletConnection]:
        return self.connections.get(network_type)

    def signature_for(self, network_type: NetworkType) -> Optional[str]:
        connection = self.connections.get(network_type)
        return connection.signature if connection else None

    def public_key_for(self, network_type: NetworkType) -> Optional[str]:
        """Identity used in history/cancel URLs.

        EVM wallets are identified by their signature, Casper wallets by the
        active public key.
        """
        connection = self.connections.get(network_type)
        if connection is None:
            return None
        if network_type == NetworkType.EVM:
            return connection.signature
        return connection.public_key

    def select_networks(self, sender_network_id: int, recipient_network_id: int) -> None:
        self.sender_network_id = sender_network_id
        self.recipient_network_id = recipient_network_id

    def disconnect(self, network_type: NetworkType) -> None:
        if self.connections.pop(network_type, None) is not None:
            logger.info(f"Session: {network_type.value} wallet disconnected")

    def clear(self) -> None:
        """Forget all connections and chain selections."""
        self.connections.clear()
        self.sender_network_id = None
        self.recipient_network_id = None
