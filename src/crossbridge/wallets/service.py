"""Wallet service.

Callers depend on this one capability surface regardless of which adapter
is active. It holds nothing but the adapter reference.
"""

from typing import Optional

from crossbridge.networks.models import NetworkType
from crossbridge.transfers.models import BridgeInSignature, CancelSignatureRequest
from crossbridge.wallets.base import Wallet


class WalletService:
    """Forwards wallet capabilities to the held adapter unchanged."""

    def __init__(self, wallet: Wallet):
        self.wallet = wallet

    @property
    def network_type(self) -> NetworkType:
        return self.wallet.network_type

    async def address(self) -> str:
        return await self.wallet.address()

    async def sign(self, message: str) -> str:
        return await self.wallet.sign(message)

    async def connect(self) -> None:
        await self.wallet.connect()

    async def send_transaction(
        self,
        destination: str,
        amount: str,
        signature: Optional[BridgeInSignature] = None,
    ) -> str:
        return await self.wallet.send_transaction(destination, amount, signature)

    async def cancel_transaction(self, request: CancelSignatureRequest) -> str:
        return await self.wallet.cancel_transaction(request)
