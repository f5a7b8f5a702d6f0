"""Base interface for wallet adapters.

Every chain family provides one adapter implementing the same five
capabilities:

1. address - active account identifier
2. sign - personal message signature (proves account ownership)
3. connect - ask the injected signer for access
4. send_transaction - bridge-in through the bridge contract
5. cancel_transaction - transfer-out of a pending bridge-in

Adapters never retry. A declined prompt surfaces as ``UserRejectedError``;
every other provider failure surfaces as ``WalletError`` (or a more
specific subclass when it can be recognized).
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from crossbridge.networks.models import NetworkType
from crossbridge.transfers.models import BridgeInSignature, CancelSignatureRequest
from crossbridge.wallets.abi import decode_revert_reason
from crossbridge.wallets.providers import USER_REJECTED_REQUEST, ProviderRpcError

logger = logging.getLogger(__name__)


class WalletError(Exception):
    """Opaque wallet failure."""
    pass


class UserRejectedError(WalletError):
    """The user declined the signer prompt. Not alarming; retry is up to the user."""
    pass


class WalletNotInstalledError(WalletError):
    """The signer extension is missing."""

    def __init__(self, message: str, install_url: Optional[str] = None):
        super().__init__(message)
        self.install_url = install_url


class ProviderSelectionError(WalletError):
    """Several providers are injected and none is the intended one."""
    pass


class ChainSwitchError(WalletError):
    """The provider refused to switch to the sender chain."""
    pass


class ContractRevertError(WalletError):
    """The bridge contract rejected the call."""

    def __init__(self, reason: str):
        super().__init__(f"Contract call reverted: {reason}")
        self.reason = reason


class CancelNotSupportedError(WalletError):
    """Cancelling is not available for this chain family."""
    pass


_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user")

# Casper Signer rejects with this exact message
CASPER_SIGNER_CANCELLED = "user cancelled signing"


def is_user_rejection(error: BaseException) -> bool:
    """Check whether a provider error means the user declined."""
    if isinstance(error, ProviderRpcError) and error.code == USER_REJECTED_REQUEST:
        return True
    message = str(error).strip().lower()
    if message == CASPER_SIGNER_CANCELLED:
        return True
    return any(marker in message for marker in _REJECTION_MARKERS)


def translate_provider_error(error: Exception, action: str) -> WalletError:
    """Map a provider exception onto the wallet error taxonomy.

    Args:
        error: Exception raised by the injected provider
        action: What was being attempted, for the message

    Returns:
        WalletError subclass to raise
    """
    if isinstance(error, WalletError):
        return error
    if is_user_rejection(error):
        logger.warning(f"User declined {action}")
        return UserRejectedError(f"User declined {action}")
    if isinstance(error, ProviderRpcError):
        reason = decode_revert_reason(error.data)
        if reason:
            logger.error(f"{action} reverted: {reason}")
            return ContractRevertError(reason)
    logger.error(f"{action} failed: {error}")
    return WalletError(f"{action} failed: {error}")


class Wallet(ABC):
    """Abstract wallet adapter."""

    #: Chain family served by this adapter
    network_type: NetworkType

    @abstractmethod
    async def address(self) -> str:
        """Get the active account identifier."""
        pass

    @abstractmethod
    async def sign(self, message: str) -> str:
        """Sign an authentication message.

        Returns:
            Raw signature as hex
        """
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Request access to the signer."""
        pass

    @abstractmethod
    async def send_transaction(
        self,
        destination: str,
        amount: str,
        signature: Optional[BridgeInSignature] = None,
    ) -> str:
        """Bridge tokens to ``destination`` on the session's recipient chain.

        Args:
            destination: Recipient address (unprefixed for Casper)
            amount: Decimal string amount
            signature: Bridge-in authorization; requested from the gateway
                when not given

        Returns:
            Transaction or deploy hash
        """
        pass

    @abstractmethod
    async def cancel_transaction(self, request: CancelSignatureRequest) -> str:
        """Unwind a pending transfer through the transfer-out entry point.

        Returns:
            Transaction or deploy hash
        """
        pass
