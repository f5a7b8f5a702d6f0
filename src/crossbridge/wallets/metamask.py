"""MetaMask (EVM) wallet adapter.

Talks to the injected EIP-1193 provider only. One adapter serves every EVM
chain the bridge supports; the provider is switched to the sender chain
before each contract call.

Bridge-in flow:
1. Resolve sender and recipient chains from the session
2. Switch the provider to the sender chain
3. Approve the bridge contract to spend the amount
4. Request a bridge-in signature from the gateway (unless one is given)
5. Call bridgeIn with the signature fields verbatim
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from web3 import Web3

from crossbridge.addresses import format_destination, shorten
from crossbridge.config import Settings, get_settings
from crossbridge.networks.models import Network, NetworkType
from crossbridge.networks.service import NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.errors import InvalidAmount, SignatureExpired
from crossbridge.transfers.models import (
    BridgeInSignature,
    CancelSignatureRequest,
    NetworkAddress,
    SignatureRequest,
)
from crossbridge.transfers.service import TransfersService
from crossbridge.utils.locks import wallet_operation_lock
from crossbridge.wallets.abi import encode_approve, encode_bridge_in, encode_transfer_out
from crossbridge.wallets.base import (
    ChainSwitchError,
    ProviderSelectionError,
    UserRejectedError,
    Wallet,
    WalletError,
    WalletNotInstalledError,
    translate_provider_error,
)
from crossbridge.wallets.providers import EthereumProvider, ProviderLocator

logger = logging.getLogger(__name__)

METAMASK_INSTALL_URL = "https://metamask.io/download/"


class JsonRpcMethods:
    """Provider RPC methods used by the adapter."""
    REQUEST_ACCOUNTS = "eth_requestAccounts"
    ACCOUNTS = "eth_accounts"
    PERSONAL_SIGN = "personal_sign"
    SEND_TRANSACTION = "eth_sendTransaction"
    SWITCH_CHAIN = "wallet_switchEthereumChain"


def to_base_units(amount: str, decimals: int) -> int:
    """Convert a decimal string amount to integer token units.

    Raises:
        InvalidAmount: If the amount is not a decimal number
    """
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    if decimals == 18:
        return Web3.to_wei(value, "ether")
    return int(value * (Decimal(10) ** decimals))


class MetaMaskWallet(Wallet):
    """EVM adapter over an injected MetaMask provider."""

    network_type = NetworkType.EVM

    def __init__(
        self,
        locator: ProviderLocator,
        networks: NetworksService,
        transfers: TransfersService,
        session: SessionState,
        settings: Optional[Settings] = None,
    ):
        self.locator = locator
        self.networks = networks
        self.transfers = transfers
        self.session = session
        self.settings = settings or get_settings()
        self._provider: Optional[EthereumProvider] = None

    def _select_provider(self) -> EthereumProvider:
        """Pick the MetaMask provider among the injected ones.

        Raises:
            WalletNotInstalledError: If no provider is injected
            ProviderSelectionError: If several are injected and none is MetaMask
        """
        ethereum = self.locator.ethereum()
        if ethereum is None:
            raise WalletNotInstalledError("MetaMask is not installed", install_url=METAMASK_INSTALL_URL)

        providers = getattr(ethereum, "providers", None)
        if not providers:
            self._provider = ethereum
            return ethereum

        for provider in providers:
            if getattr(provider, "is_metamask", False):
                self._provider = provider
                return provider
        raise ProviderSelectionError("Several EVM providers are injected and none is MetaMask")

    async def _request(self, method: str, params: Optional[list] = None, action: Optional[str] = None):
        provider = self._provider or self._select_provider()
        try:
            return await provider.request(method, params)
        except Exception as e:
            raise translate_provider_error(e, action or method) from e

    async def address(self) -> str:
        accounts = await self._request(JsonRpcMethods.ACCOUNTS)
        if not accounts:
            raise WalletError("No MetaMask account is connected")
        return Web3.to_checksum_address(accounts[0])

    async def sign(self, message: str) -> str:
        address = await self.address()
        message_hex = "0x" + message.encode("utf-8").hex()
        return await self._request(
            JsonRpcMethods.PERSONAL_SIGN, [message_hex, address], action="message signature"
        )

    async def connect(self) -> None:
        self._select_provider()
        await self._request(JsonRpcMethods.REQUEST_ACCOUNTS, action="connection")
        logger.info("MetaMask connected")

    async def switch_chain(self, network: Network) -> None:
        """Switch the provider to ``network``.

        Raises:
            ChainSwitchError: If the provider cannot switch
            UserRejectedError: If the user declined the switch
        """
        chain_id = self.settings.get_evm_chain_id(network.name)
        try:
            await self._request(JsonRpcMethods.SWITCH_CHAIN, [{"chainId": chain_id}], action="chain switch")
        except UserRejectedError:
            raise
        except WalletError as e:
            raise ChainSwitchError(f"Could not switch to {network.name} ({chain_id}): {e}") from e
        logger.info(f"Switched provider to {network.name} ({chain_id})")

    async def approve(self, amount: str, network: Network) -> str:
        """Approve the bridge contract of ``network`` to spend ``amount`` tokens.

        Raises:
            ConfigurationError: If the chain has no contract mapping
        """
        contracts = self.settings.get_evm_contracts(network.name)
        amount_units = to_base_units(amount, self.settings.evm_token_decimals)
        data = encode_approve(contracts.bridge_contract, amount_units)
        tx_hash = await self._send_contract_call(contracts.token_contract, data, action="approve")
        logger.info(f"Approved {amount} for bridge on {network.name}: {tx_hash}")
        return tx_hash

    async def _send_contract_call(self, to: str, data: str, action: str) -> str:
        sender = await self.address()
        tx = {
            "from": sender,
            "to": Web3.to_checksum_address(to),
            "data": data,
            "gas": hex(self.settings.eth_gas_limit),
        }
        return await self._request(JsonRpcMethods.SEND_TRANSACTION, [tx], action=action)

    async def _session_networks(self) -> tuple[Network, Network]:
        sender_id = self.session.sender_network_id
        recipient_id = self.session.recipient_network_id
        if sender_id is None or recipient_id is None:
            raise WalletError("Sender and recipient networks are not selected")

        await self.networks.connected()
        return self.networks.find_network(sender_id), self.networks.find_network(recipient_id)

    async def send_transaction(
        self,
        destination: str,
        amount: str,
        signature: Optional[BridgeInSignature] = None,
    ) -> str:
        async with wallet_operation_lock(self, operation="bridge_in"):
            sender_network, recipient_network = await self._session_networks()
            await self.switch_chain(sender_network)
            await self.approve(amount, sender_network)

            if signature is None:
                sender = NetworkAddress(address=await self.address(), network_name=sender_network.name)
                token = await self.networks.default_token(sender_network.id)
                request = SignatureRequest(
                    sender=sender,
                    token_id=token.id,
                    amount=amount,
                    destination=NetworkAddress(
                        address=format_destination(destination, recipient_network.is_evm),
                        network_name=recipient_network.name,
                    ),
                )
                signature = await self.transfers.signature(request)

            # The approve prompt may have outlived the deadline
            if signature.is_expired():
                logger.warning(f"Signature nonce={signature.nonce} expired before bridgeIn")
                raise SignatureExpired(signature.deadline)

            contracts = self.settings.get_evm_contracts(sender_network.name)
            data = encode_bridge_in(
                contracts.token_contract,
                signature.amount,
                signature.gas_commission,
                signature.destination.network_name,
                signature.destination.address,
                signature.deadline,
                signature.nonce,
                signature.signature,
            )
            tx_hash = await self._send_contract_call(contracts.bridge_contract, data, action="bridgeIn")
            logger.info(
                f"bridgeIn submitted on {sender_network.name}: {tx_hash} "
                f"(nonce={signature.nonce}, to={shorten(signature.destination.address)})"
            )
            return tx_hash

    async def cancel_transaction(self, request: CancelSignatureRequest) -> str:
        async with wallet_operation_lock(self, operation="transfer_out"):
            cancel = await self.transfers.cancel_signature(request)
            network = await self.networks.get_network(request.network_id)
            await self.switch_chain(network)

            contracts = self.settings.get_evm_contracts(network.name)
            data = encode_transfer_out(
                cancel.token,
                cancel.recipient,
                cancel.amount,
                cancel.commission,
                cancel.nonce,
                cancel.signature,
            )
            tx_hash = await self._send_contract_call(contracts.bridge_contract, data, action="transferOut")
            logger.info(f"transferOut submitted for transfer {request.transfer_id}: {tx_hash}")
            return tx_hash
