"""Transfer orchestrator.

Sequences the signature-bound transfer protocol on top of the wallet
service and the gateway:

Bridge-in:  IDLE -> ESTIMATING -> AWAITING_SIGNATURE
            -> AWAITING_CHAIN_CONFIRMATION -> SUBMITTED | FAILED
Cancel:     IDLE -> REQUESTING_CANCEL_SIGNATURE
            -> AWAITING_CHAIN_CONFIRMATION -> CANCELED | FAILED

Input faults are raised before any gateway or wallet call. Amounts stay
decimal strings; only the adapters convert them for contract calls. The
orchestrator never waits for settlement: transfer status is owned by the
backend and observed through history.
"""

import logging
import re
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from crossbridge.addresses import format_destination, shorten, validate_for_family
from crossbridge.networks.models import Network, NetworkType
from crossbridge.networks.service import NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.errors import (
    InvalidAmount,
    SameChainTransfer,
    SignatureExpired,
    TransferValidationError,
    UnsupportedDestination,
)
from crossbridge.transfers.models import (
    BridgeInSignature,
    CancelSignatureRequest,
    NetworkAddress,
    SignatureRequest,
    TransferEstimate,
    TransferEstimateRequest,
    TransferPagination,
    TransfersHistory,
)
from crossbridge.transfers.service import TransfersService
from crossbridge.wallets.base import WalletError
from crossbridge.wallets.service import WalletService

logger = logging.getLogger(__name__)

_AMOUNT_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")

__all__ = [
    "CancelOutcome",
    "CancelResult",
    "InvalidAmount",
    "SameChainTransfer",
    "SignatureExpired",
    "TransferOrchestrator",
    "TransferReceipt",
    "TransferState",
    "TransferValidationError",
    "UnsupportedDestination",
    "validate_amount",
]


class TransferState(str, Enum):
    """Protocol state of the orchestrator."""
    IDLE = "idle"
    ESTIMATING = "estimating"
    AWAITING_SIGNATURE = "awaiting_signature"
    AWAITING_CHAIN_CONFIRMATION = "awaiting_chain_confirmation"
    SUBMITTED = "submitted"
    FAILED = "failed"
    REQUESTING_CANCEL_SIGNATURE = "requesting_cancel_signature"
    CANCELED = "canceled"


class CancelOutcome(str, Enum):
    CANCELED = "canceled"
    NOT_IMPLEMENTED = "not_implemented"


@dataclass
class TransferReceipt:
    """Result of a submitted bridge-in."""
    tx_hash: str
    signature: BridgeInSignature
    estimate: Optional[TransferEstimate] = None


@dataclass
class CancelResult:
    """Result of a cancel request."""
    outcome: CancelOutcome
    transfer_id: int
    tx_hash: Optional[str] = None


def validate_amount(amount: str) -> Decimal:
    """Parse a positive plain decimal string amount.

    The string is forwarded to the gateway as is, so only digits with an
    optional fractional part are accepted.

    Raises:
        InvalidAmount: If the amount is empty, not a plain decimal or <= 0
    """
    if not isinstance(amount, str) or not amount.strip():
        raise InvalidAmount("Amount is required")
    if not _AMOUNT_PATTERN.fullmatch(amount):
        raise InvalidAmount(f"Amount is not a number: {amount!r}")
    value = Decimal(amount)
    if value <= 0:
        raise InvalidAmount(f"Amount must be positive: {amount!r}")
    return value


class TransferOrchestrator:
    """Runs estimate, signature, submission and cancel steps of a transfer."""

    def __init__(
        self,
        wallet: Optional[WalletService],
        networks: NetworksService,
        transfers: TransfersService,
        session: SessionState,
        clock: Callable[[], float] = time.time,
        page_size: int = 5,
    ):
        self.wallet = wallet
        self.networks = networks
        self.transfers = transfers
        self.session = session
        self.clock = clock
        self.page_size = page_size
        self.state = TransferState.IDLE
        self._pending_destination: Optional[str] = None
        self._pending_amount: Optional[str] = None

    def _fail(self, error: Exception) -> Exception:
        self.state = TransferState.FAILED
        return error

    def _require_wallet(self) -> WalletService:
        if self.wallet is None:
            raise self._fail(WalletError("No wallet is connected"))
        return self.wallet

    async def select_networks(self, sender_id: int, recipient_id: int) -> tuple[Network, Network]:
        """Resolve the sender and recipient chains and remember them in the session.

        Raises:
            DirectoryError: If either chain is not connected
        """
        await self.networks.connected()
        sender = self.networks.find_network(sender_id)
        recipient = self.networks.find_network(recipient_id)
        self.session.select_networks(sender.id, recipient.id)
        return sender, recipient

    def validate(
        self,
        sender: Network,
        recipient: Network,
        amount: str,
        recipient_address: Optional[str] = None,
    ) -> None:
        """Check transfer input without any network call.

        Raises:
            SameChainTransfer: If sender and recipient chains are the same
            InvalidAmount: If the amount is not a positive decimal string
            UnsupportedDestination: If the address does not fit the recipient chain
        """
        if sender.id == recipient.id or sender.name == recipient.name:
            raise self._fail(SameChainTransfer(f"Cannot transfer from {sender.name} to itself"))
        try:
            validate_amount(amount)
        except InvalidAmount:
            self.state = TransferState.FAILED
            raise
        if recipient_address is not None and not validate_for_family(recipient_address, recipient.is_evm):
            raise self._fail(UnsupportedDestination(
                f"{shorten(recipient_address)} is not a valid {recipient.family.value} address"
            ))

    async def estimate(
        self,
        sender: Network,
        recipient: Network,
        token_id: int,
        amount: str,
        recipient_address: Optional[str] = None,
    ) -> TransferEstimate:
        """Get the fee and confirmation time estimate for a transfer."""
        self.validate(sender, recipient, amount, recipient_address)
        self.state = TransferState.ESTIMATING
        request = TransferEstimateRequest(
            sender_network=sender.name,
            recipient_network=recipient.name,
            token_id=token_id,
            amount=amount,
        )
        try:
            estimate = await self.transfers.estimate(request)
        except Exception:
            self.state = TransferState.FAILED
            raise
        logger.info(
            f"Estimate {sender.name}->{recipient.name} {amount}: "
            f"fee={estimate.fee} ({estimate.fee_percentage}), ~{estimate.estimated_confirmation_time}s"
        )
        return estimate

    async def request_signature(
        self,
        sender: Network,
        recipient: Network,
        token_id: int,
        amount: str,
        destination: str,
        sender_address: Optional[str] = None,
    ) -> BridgeInSignature:
        """Request a bridge-in signature and check it has not already expired.

        Raises:
            SignatureExpired: If the returned deadline is already in the past
        """
        self.validate(sender, recipient, amount, destination)
        self.state = TransferState.AWAITING_SIGNATURE
        try:
            if sender_address is None:
                sender_address = await self._require_wallet().address()
            request = SignatureRequest(
                sender=NetworkAddress(address=sender_address, network_name=sender.name),
                token_id=token_id,
                amount=amount,
                destination=NetworkAddress(
                    address=format_destination(destination, recipient.is_evm),
                    network_name=recipient.name,
                ),
            )
            signature = await self.transfers.signature(request)
        except Exception:
            self.state = TransferState.FAILED
            raise

        if signature.is_expired(self.clock()):
            logger.warning(f"Gateway returned expired signature nonce={signature.nonce}")
            raise self._fail(SignatureExpired(signature.deadline))

        self.session.select_networks(sender.id, recipient.id)
        self._pending_destination = destination
        self._pending_amount = amount
        return signature

    async def submit(
        self,
        signature: BridgeInSignature,
        destination: Optional[str] = None,
        amount: Optional[str] = None,
    ) -> str:
        """Submit a bridge-in through the active wallet.

        Success means the chain call returned; settlement is not awaited.

        Raises:
            SignatureExpired: If the deadline has passed; no wallet call is made
        """
        if signature.is_expired(self.clock()):
            logger.warning(f"Refusing to submit expired signature nonce={signature.nonce}")
            raise self._fail(SignatureExpired(signature.deadline))

        destination = destination or self._pending_destination or signature.destination.address
        amount = amount or self._pending_amount
        if amount is None:
            raise self._fail(TransferValidationError("No amount for submission"))

        self.state = TransferState.AWAITING_CHAIN_CONFIRMATION
        try:
            tx_hash = await self._require_wallet().send_transaction(destination, amount, signature)
        except Exception:
            self.state = TransferState.FAILED
            raise

        self.state = TransferState.SUBMITTED
        self._pending_destination = None
        self._pending_amount = None
        logger.info(f"Transfer submitted: {tx_hash} (nonce={signature.nonce})")
        return tx_hash

    async def transfer(
        self,
        sender: Network,
        recipient: Network,
        token_id: int,
        amount: str,
        destination: str,
    ) -> TransferReceipt:
        """Estimate, request a signature and submit in one go."""
        estimate = await self.estimate(sender, recipient, token_id, amount, destination)
        signature = await self.request_signature(sender, recipient, token_id, amount, destination)
        tx_hash = await self.submit(signature, destination, amount)
        return TransferReceipt(tx_hash=tx_hash, signature=signature, estimate=estimate)

    def pagination_for(self, network: Network, page: int = 0) -> Optional[TransferPagination]:
        """Build a history query for the session's wallet on ``network``.

        Returns None when the wallet has not proven ownership yet.
        """
        signature = self.session.signature_for(network.type)
        pub_key = self.session.public_key_for(network.type)
        if not signature or not pub_key:
            return None
        return TransferPagination(
            pub_key=pub_key,
            signature=signature,
            network_id=network.id,
            limit=self.page_size,
        ).page(page)

    async def history(self, pagination: Optional[TransferPagination]) -> TransfersHistory:
        """Fetch one page of history; without a signature nothing is requested."""
        if pagination is None or not pagination.signature:
            logger.debug("No ownership signature, skipping history request")
            return TransfersHistory(limit=self.page_size, offset=0, total_count=0, transfers=[])
        return await self.transfers.history(pagination)

    async def cancel(
        self,
        transfer_id: int,
        address: str,
        network_id: Optional[int] = None,
    ) -> CancelResult:
        """Cancel a pending transfer through the transfer-out path.

        Args:
            transfer_id: Transfer to unwind
            address: Address the cancel signature is issued for
            network_id: Chain of the transfer, session sender chain by default

        Returns:
            CancelResult; NOT_IMPLEMENTED for Casper wallets, without any call
        """
        if self._require_wallet().network_type != NetworkType.EVM:
            logger.info(f"Cancel of transfer {transfer_id} is not implemented for Casper")
            return CancelResult(outcome=CancelOutcome.NOT_IMPLEMENTED, transfer_id=transfer_id)

        signature = self.session.signature_for(NetworkType.EVM)
        if not signature:
            raise self._fail(WalletError("EVM wallet has not signed in"))
        network_id = network_id if network_id is not None else self.session.sender_network_id
        if network_id is None:
            raise self._fail(WalletError("No network selected for cancel"))

        self.state = TransferState.REQUESTING_CANCEL_SIGNATURE
        request = CancelSignatureRequest(
            transfer_id=transfer_id,
            network_id=network_id,
            signature=signature,
            public_key=address,
        )
        try:
            tx_hash = await self.wallet.cancel_transaction(request)
        except Exception:
            self.state = TransferState.FAILED
            raise

        self.state = TransferState.CANCELED
        logger.info(f"Transfer {transfer_id} canceled: {tx_hash}")
        return CancelResult(outcome=CancelOutcome.CANCELED, transfer_id=transfer_id, tx_hash=tx_hash)
