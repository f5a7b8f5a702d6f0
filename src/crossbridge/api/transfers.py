"""Transfer protocol client (``/transfers`` endpoints)."""

import logging

from crossbridge.api.base import APIClient
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

logger = logging.getLogger(__name__)


class TransfersClient(APIClient):
    """HTTP implementation of the transfers API."""

    async def history(self, pagination: TransferPagination) -> TransfersHistory:
        """Get one page of transfers for an authenticated identity."""
        response = await self._get(
            f"/transfers/history/{pagination.signature}/{pagination.pub_key}",
            params={
                "network-id": pagination.network_id,
                "offset": pagination.offset,
                "limit": pagination.limit,
            },
        )
        return TransfersHistory.model_validate(self._json(response))

    async def estimate(self, request: TransferEstimateRequest) -> TransferEstimate:
        """Get fee and confirmation time estimate for a transfer."""
        response = await self._get(
            f"/transfers/estimate/{request.sender_network}/{request.recipient_network}"
            f"/{request.token_id}/{request.amount}"
        )
        return TransferEstimate.model_validate(self._json(response))

    async def cancel(self, transfer_id: int, signature: str, pub_key: str) -> None:
        """Cancel a pending transfer record."""
        await self._delete(f"/transfers/{transfer_id}/{signature}/{pub_key}")

    async def cancel_signature(self, request: CancelSignatureRequest) -> CancelSignature:
        """Get a signature authorizing transfer-out of a pending transfer."""
        response = await self._get(
            f"/transfers/cancel-signature/{request.transfer_id}/{request.network_id}"
            f"/{request.signature}/{request.public_key}"
        )
        return CancelSignature.model_validate(self._json(response))

    async def signature(self, request: SignatureRequest) -> BridgeInSignature:
        """Get a signature authorizing one bridge-in call."""
        response = await self._post("/transfers/bridge-in-signature", json=request.to_payload())
        signature = BridgeInSignature.model_validate(self._json(response))
        logger.info(
            f"Bridge-in signature issued: nonce={signature.nonce} deadline={signature.deadline} "
            f"destination={signature.destination.network_name}"
        )
        return signature
