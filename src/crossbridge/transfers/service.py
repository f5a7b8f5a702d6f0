"""Transfer service: the seam wallets and the orchestrator call through."""

from crossbridge.api.transfers import TransfersClient
from crossbridge.transfers.models import (
    BridgeInSignature,
    CancelSignature,
    CancelSignatureRequest,
    SignatureRequest,
    TransferEstimate,
    TransferEstimateRequest,
    TransferPagination,
    TransfersHistory,
)


class TransfersService:
    """Exposes transfer protocol calls."""

    def __init__(self, client: TransfersClient):
        self.client = client

    async def history(self, pagination: TransferPagination) -> TransfersHistory:
        return await self.client.history(pagination)

    async def estimate(self, request: TransferEstimateRequest) -> TransferEstimate:
        return await self.client.estimate(request)

    async def cancel(self, transfer_id: int, signature: str, pub_key: str) -> None:
        await self.client.cancel(transfer_id, signature, pub_key)

    async def cancel_signature(self, request: CancelSignatureRequest) -> CancelSignature:
        return await self.client.cancel_signature(request)

    async def signature(self, request: SignatureRequest) -> BridgeInSignature:
        return await self.client.signature(request)
