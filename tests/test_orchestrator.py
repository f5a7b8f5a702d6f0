"""Tests for the transfer orchestrator."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import decode

from crossbridge.networks.models import NetworkType
from crossbridge.transfers.models import (
    TransferEstimate,
    TransferPagination,
    TransfersHistory,
)
from crossbridge.transfers.orchestrator import (
    CancelOutcome,
    InvalidAmount,
    SameChainTransfer,
    SignatureExpired,
    TransferOrchestrator,
    TransferState,
    UnsupportedDestination,
    validate_amount,
)
from crossbridge.wallets.base import WalletError
from crossbridge.wallets.metamask import MetaMaskWallet
from crossbridge.wallets.service import WalletService

from conftest import CASPER_ACCOUNT_HASH, EVM_ACCOUNT, GOERLI_BRIDGE

ESTIMATE = TransferEstimate(fee="5.1", fee_percentage="0.004", estimated_confirmation_time="10")


@pytest.fixture
def wallet_service():
    service = MagicMock(spec=WalletService)
    service.network_type = NetworkType.EVM
    service.address = AsyncMock(return_value=EVM_ACCOUNT)
    service.send_transaction = AsyncMock(return_value="0xtx")
    service.cancel_transaction = AsyncMock(return_value="0xcancel")
    return service


@pytest.fixture
def orchestrator(wallet_service, networks_service, transfers_service, session):
    transfers_service.estimate = AsyncMock(return_value=ESTIMATE)
    return TransferOrchestrator(wallet_service, networks_service, transfers_service, session)


@pytest.fixture
def metamask_orchestrator(locator, networks_service, transfers_service, session, settings):
    """Orchestrator driving a real MetaMask adapter over the fake provider."""
    wallet = MetaMaskWallet(locator, networks_service, transfers_service, session, settings=settings)
    transfers_service.estimate = AsyncMock(return_value=ESTIMATE)
    return TransferOrchestrator(WalletService(wallet), networks_service, transfers_service, session)


class TestValidation:
    """Input faults are raised before any network call."""

    @pytest.mark.parametrize("amount", [
        "0", "0.000", "-1", "", "   ", "abc", "NaN", "Infinity", None,
        "1_000", " 1.5 ", "1e3", "+1", "1.", ".5", "0x10",
    ])
    def test_invalid_amounts(self, amount):
        with pytest.raises(InvalidAmount):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", ["0.001", "123", "1.5", "007"])
    def test_valid_amounts(self, amount):
        assert validate_amount(amount) > 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["1_000", " 1.5 ", "1e3"])
    async def test_non_plain_amount_never_reaches_gateway(
        self, orchestrator, transfers_service, goerli, casper_network, amount
    ):
        transfers_service.signature = AsyncMock()

        with pytest.raises(InvalidAmount):
            await orchestrator.estimate(goerli, casper_network, 0, amount)
        with pytest.raises(InvalidAmount):
            await orchestrator.request_signature(goerli, casper_network, 0, amount, CASPER_ACCOUNT_HASH)

        transfers_service.estimate.assert_not_called()
        transfers_service.signature.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-1", "", "abc"])
    async def test_estimate_rejects_amount(self, orchestrator, transfers_service, goerli, casper_network, amount):
        with pytest.raises(InvalidAmount):
            await orchestrator.estimate(goerli, casper_network, 0, amount)

        transfers_service.estimate.assert_not_called()
        assert orchestrator.state == TransferState.FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["1", "abc"])
    async def test_same_chain_rejected(self, orchestrator, transfers_service, goerli, amount):
        with pytest.raises(SameChainTransfer):
            await orchestrator.estimate(goerli, goerli, 0, amount)

        transfers_service.estimate.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_destination(self, orchestrator, transfers_service, goerli, casper_network):
        with pytest.raises(UnsupportedDestination):
            await orchestrator.estimate(goerli, casper_network, 0, "1", recipient_address=EVM_ACCOUNT)

        with pytest.raises(UnsupportedDestination):
            await orchestrator.estimate(casper_network, goerli, 0, "1", recipient_address=CASPER_ACCOUNT_HASH)

        transfers_service.estimate.assert_not_called()


class TestEstimate:
    """Tests for estimation."""

    @pytest.mark.asyncio
    async def test_round_trip(self, orchestrator, transfers_service, goerli, casper_network):
        estimate = await orchestrator.estimate(goerli, casper_network, 0, "0.5", CASPER_ACCOUNT_HASH)

        assert estimate == ESTIMATE
        request = transfers_service.estimate.call_args.args[0]
        assert request.sender_network == "GOERLI"
        assert request.recipient_network == "CASPER-TEST"
        assert request.token_id == 0
        assert request.amount == "0.5"
        assert orchestrator.state == TransferState.ESTIMATING

    @pytest.mark.asyncio
    async def test_select_networks(self, orchestrator, session):
        sender, recipient = await orchestrator.select_networks(1, 0)

        assert sender.name == "GOERLI"
        assert recipient.name == "CASPER-TEST"
        assert (session.sender_network_id, session.recipient_network_id) == (1, 0)


class TestSignatureAndSubmit:
    """Tests for signature requests and submission."""

    @pytest.mark.asyncio
    async def test_request_signature(self, orchestrator, transfers_service, make_signature, session, goerli, casper_network):
        transfers_service.signature = AsyncMock(return_value=make_signature())

        signature = await orchestrator.request_signature(goerli, casper_network, 0, "0.5", CASPER_ACCOUNT_HASH)

        assert signature.nonce == 7
        request = transfers_service.signature.call_args.args[0]
        assert request.sender.address == EVM_ACCOUNT
        assert request.destination.address == "account-hash-" + CASPER_ACCOUNT_HASH
        assert (session.sender_network_id, session.recipient_network_id) == (1, 0)
        assert orchestrator.state == TransferState.AWAITING_SIGNATURE

    @pytest.mark.asyncio
    async def test_expired_signature_from_gateway(
        self, orchestrator, transfers_service, make_signature, wallet_service, goerli, casper_network
    ):
        transfers_service.signature = AsyncMock(return_value=make_signature(deadline=1000))

        with pytest.raises(SignatureExpired) as exc_info:
            await orchestrator.request_signature(goerli, casper_network, 0, "0.5", CASPER_ACCOUNT_HASH)

        assert exc_info.value.deadline == "1000"
        assert orchestrator.state == TransferState.FAILED
        wallet_service.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_expired_makes_no_wallet_call(self, orchestrator, wallet_service, make_signature):
        with pytest.raises(SignatureExpired):
            await orchestrator.submit(make_signature(deadline=1000), CASPER_ACCOUNT_HASH, "0.5")

        wallet_service.send_transaction.assert_not_called()
        wallet_service.address.assert_not_called()
        assert orchestrator.state == TransferState.FAILED

    @pytest.mark.asyncio
    async def test_submit_uses_clock(self, wallet_service, networks_service, transfers_service, session, make_signature):
        orchestrator = TransferOrchestrator(
            wallet_service, networks_service, transfers_service, session, clock=lambda: 2000
        )

        with pytest.raises(SignatureExpired):
            await orchestrator.submit(make_signature(deadline=1500), CASPER_ACCOUNT_HASH, "0.5")

        wallet_service.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit(self, orchestrator, wallet_service, make_signature):
        signature = make_signature()

        tx_hash = await orchestrator.submit(signature, CASPER_ACCOUNT_HASH, "0.5")

        assert tx_hash == "0xtx"
        wallet_service.send_transaction.assert_awaited_once_with(CASPER_ACCOUNT_HASH, "0.5", signature)
        assert orchestrator.state == TransferState.SUBMITTED

    @pytest.mark.asyncio
    async def test_submit_failure(self, orchestrator, wallet_service, make_signature):
        wallet_service.send_transaction.side_effect = WalletError("boom")

        with pytest.raises(WalletError):
            await orchestrator.submit(make_signature(), CASPER_ACCOUNT_HASH, "0.5")

        assert orchestrator.state == TransferState.FAILED

    @pytest.mark.asyncio
    async def test_end_to_end_bridge_in(
        self, metamask_orchestrator, transfers_service, make_signature, ethereum, goerli, casper_network
    ):
        """Estimate, signature and bridgeIn through the MetaMask adapter."""
        signature = make_signature()
        transfers_service.signature = AsyncMock(return_value=signature)

        receipt = await metamask_orchestrator.transfer(goerli, casper_network, 0, "0.5", CASPER_ACCOUNT_HASH)

        assert receipt.estimate == ESTIMATE
        assert receipt.signature == signature
        assert metamask_orchestrator.state == TransferState.SUBMITTED

        approve_tx, bridge_tx = ethereum.sent_transactions()
        assert receipt.tx_hash == "0x" + f"{2:064x}"
        assert bridge_tx["to"].lower() == GOERLI_BRIDGE
        args = decode(
            ["address", "uint256", "uint256", "string", "string", "uint256", "uint256", "bytes"],
            bytes.fromhex(bridge_tx["data"][10:]),
        )
        assert args[1] == int(signature.amount)
        assert args[3] == signature.destination.network_name
        assert args[4] == signature.destination.address
        assert args[6] == 7
        assert args[7] == bytes.fromhex(signature.signature[2:])
        # The orchestrator's signature is reused, not requested again
        transfers_service.signature.assert_awaited_once()


class TestCancel:
    """Tests for cancel."""

    @pytest.mark.asyncio
    async def test_evm_cancel(
        self, metamask_orchestrator, transfers_service, cancel_signature, session, ethereum
    ):
        session.mark_connected(NetworkType.EVM, EVM_ACCOUNT, signature="0xownership")
        session.select_networks(1, 0)
        transfers_service.cancel_signature = AsyncMock(return_value=cancel_signature)

        result = await metamask_orchestrator.cancel(42, EVM_ACCOUNT)

        assert result.outcome == CancelOutcome.CANCELED
        assert result.transfer_id == 42
        transfers_service.cancel_signature.assert_awaited_once()
        request = transfers_service.cancel_signature.call_args.args[0]
        assert request.transfer_id == 42
        assert request.network_id == 1
        assert request.signature == "0xownership"
        assert request.public_key == EVM_ACCOUNT
        assert len(ethereum.sent_transactions()) == 1
        assert result.tx_hash == "0x" + f"{1:064x}"
        assert metamask_orchestrator.state == TransferState.CANCELED

    @pytest.mark.asyncio
    async def test_evm_cancel_requires_ownership_signature(self, orchestrator, wallet_service):
        with pytest.raises(WalletError):
            await orchestrator.cancel(42, EVM_ACCOUNT, network_id=1)

        wallet_service.cancel_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_casper_cancel_not_implemented(self, orchestrator, wallet_service, transfers_service):
        wallet_service.network_type = NetworkType.CASPER

        result = await orchestrator.cancel(42, CASPER_ACCOUNT_HASH)

        assert result.outcome == CancelOutcome.NOT_IMPLEMENTED
        assert result.tx_hash is None
        wallet_service.cancel_transaction.assert_not_called()
        transfers_service.cancel_signature.assert_not_called()


class TestHistory:
    """Tests for history queries."""

    @pytest.mark.asyncio
    async def test_no_signature_no_request(self, orchestrator, transfers_service):
        history = await orchestrator.history(None)

        assert history.transfers == []
        assert history.total_count == 0
        transfers_service.history.assert_not_called()

        empty = TransferPagination(pub_key="pk", signature="", network_id=1)
        await orchestrator.history(empty)
        transfers_service.history.assert_not_called()

    @pytest.mark.asyncio
    async def test_pages(self, orchestrator, transfers_service, session, goerli):
        session.mark_connected(NetworkType.EVM, EVM_ACCOUNT, signature="0xownership")
        transfers_service.history = AsyncMock(
            return_value=TransfersHistory(limit=5, offset=0, total_count=0, transfers=[])
        )

        for page in range(3):
            await orchestrator.history(orchestrator.pagination_for(goerli, page))

        offsets = [call.args[0].offset for call in transfers_service.history.call_args_list]
        assert offsets == [0, 5, 10]
        pagination = transfers_service.history.call_args.args[0]
        assert pagination.pub_key == "0xownership"
        assert pagination.signature == "0xownership"
        assert pagination.network_id == 1

    def test_pagination_needs_session(self, orchestrator, casper_network, session):
        assert orchestrator.pagination_for(casper_network) is None

        session.mark_connected(NetworkType.CASPER, CASPER_ACCOUNT_HASH, signature="sig", public_key="01aa")
        pagination = orchestrator.pagination_for(casper_network, 1)
        assert pagination.pub_key == "01aa"
        assert pagination.offset == 5
