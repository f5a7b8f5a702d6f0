"""Wallet factory.

Creates the adapter for a chain family and wraps it in a fresh
``WalletService``.
"""

import logging
from typing import Optional

from crossbridge.api.casper import CasperRelayClient
from crossbridge.config import Settings, get_settings
from crossbridge.networks.models import NetworkType
from crossbridge.networks.service import NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.service import TransfersService
from crossbridge.wallets.base import Wallet
from crossbridge.wallets.providers import ProviderLocator
from crossbridge.wallets.service import WalletService

logger = logging.getLogger(__name__)


def create_wallet(
    network_type: NetworkType,
    locator: ProviderLocator,
    networks: NetworksService,
    transfers: TransfersService,
    session: SessionState,
    settings: Optional[Settings] = None,
    relay: Optional[CasperRelayClient] = None,
) -> Wallet:
    """Create the wallet adapter for a chain family.

    Args:
        network_type: Chain family of the wallet
        locator: Injected provider locator
        networks: Chain directory service
        transfers: Transfer protocol service
        session: Session state shared with the orchestrator
        settings: Settings, global settings when omitted
        relay: Deploy relay client (Casper only)

    Returns:
        Wallet adapter

    Raises:
        ValueError: If the network type has no adapter
    """
    settings = settings or get_settings()
    logger.debug(f"Creating wallet adapter for {network_type}")

    if network_type == NetworkType.EVM:
        from crossbridge.wallets.metamask import MetaMaskWallet
        return MetaMaskWallet(locator, networks, transfers, session, settings=settings)

    if network_type == NetworkType.CASPER:
        from crossbridge.wallets.casper import CasperWallet
        return CasperWallet(locator, networks, transfers, session, relay=relay, settings=settings)

    raise ValueError(f"No wallet adapter for network type {network_type}")


def create_wallet_service(network_type: NetworkType, *args, **kwargs) -> WalletService:
    """Create an adapter and a fresh service holding it."""
    return WalletService(create_wallet(network_type, *args, **kwargs))
