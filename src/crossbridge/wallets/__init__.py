"""Wallet adapters.

Provides one adapter per chain family behind a common interface:
- MetaMaskWallet: EVM chains through an injected EIP-1193 provider
- CasperWallet: Casper through the Casper Signer extension
"""

from crossbridge.wallets.base import (
    CancelNotSupportedError,
    ChainSwitchError,
    ContractRevertError,
    ProviderSelectionError,
    UserRejectedError,
    Wallet,
    WalletError,
    WalletNotInstalledError,
)
from crossbridge.wallets.factory import create_wallet, create_wallet_service
from crossbridge.wallets.providers import ProviderLocator, ProviderRpcError
from crossbridge.wallets.service import WalletService

__all__ = [
    "CancelNotSupportedError",
    "ChainSwitchError",
    "ContractRevertError",
    "ProviderLocator",
    "ProviderRpcError",
    "ProviderSelectionError",
    "UserRejectedError",
    "Wallet",
    "WalletError",
    "WalletNotInstalledError",
    "WalletService",
    "create_wallet",
    "create_wallet_service",
]
