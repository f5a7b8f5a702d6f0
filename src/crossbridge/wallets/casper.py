"""Casper (deploy-style) wallet adapter.

Works through the Casper Signer extension: the extension holds the keys,
signs messages and co-signs deploys built here. Signed deploys go to the
deploy relay together with the RPC node address.
"""

import logging
from typing import Optional

from crossbridge.addresses import format_destination, shorten
from crossbridge.api.casper import CasperRelayClient
from crossbridge.casper import (
    CasperEntryPoints,
    CasperRuntimeArgs,
    deploy_to_json,
    make_deploy,
    standard_payment,
)
from crossbridge.casper.cl_values import RuntimeArgs, byte_array, string, u128, u256
from crossbridge.casper.deploy import StoredContractByHash, contract_hash_from_hex
from crossbridge.casper.keys import PublicKey
from crossbridge.config import ConfigurationError, Settings, get_settings
from crossbridge.networks.models import NetworkType
from crossbridge.networks.service import NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.errors import SameChainTransfer, SignatureExpired
from crossbridge.transfers.models import (
    BridgeInSignature,
    CancelSignatureRequest,
    NetworkAddress,
    SignatureRequest,
)
from crossbridge.transfers.service import TransfersService
from crossbridge.utils.locks import wallet_operation_lock
from crossbridge.wallets.base import (
    CancelNotSupportedError,
    Wallet,
    WalletError,
    WalletNotInstalledError,
    translate_provider_error,
)
from crossbridge.wallets.providers import CasperSignerProvider, ProviderLocator

logger = logging.getLogger(__name__)


def _hex_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


class CasperWallet(Wallet):
    """Deploy-style adapter over the Casper Signer extension."""

    network_type = NetworkType.CASPER

    def __init__(
        self,
        locator: ProviderLocator,
        networks: NetworksService,
        transfers: TransfersService,
        session: SessionState,
        relay: Optional[CasperRelayClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.locator = locator
        self.networks = networks
        self.transfers = transfers
        self.session = session
        self.settings = settings or get_settings()
        self.relay = relay or CasperRelayClient(settings=self.settings)

    @property
    def provider(self) -> CasperSignerProvider:
        """The signer extension.

        Raises:
            WalletNotInstalledError: If the extension is not installed
        """
        signer = self.locator.casper_signer()
        if signer is None:
            raise WalletNotInstalledError(
                "Casper Signer is not installed",
                install_url=self.settings.casper_signer_install_url,
            )
        return signer

    async def _call(self, action: str, method: str, *args):
        provider = self.provider
        try:
            return await getattr(provider, method)(*args)
        except Exception as e:
            raise translate_provider_error(e, action) from e

    async def is_site_connected(self) -> bool:
        """Check whether the extension has granted this site access."""
        return bool(await self._call("connection check", "is_connected"))

    async def public_key(self) -> PublicKey:
        public_key_hex = await self._call("public key query", "get_active_public_key")
        try:
            return PublicKey.from_hex(public_key_hex)
        except ValueError as e:
            raise WalletError(f"Signer returned an invalid public key: {e}") from e

    async def address(self) -> str:
        """Account hash of the active key; the bridge identifies accounts by hash."""
        public_key = await self.public_key()
        return public_key.account_hash().hex()

    async def sign(self, message: str) -> str:
        public_key = await self.public_key()
        return await self._call("message signature", "sign_message", message, public_key.to_hex())

    async def connect(self) -> None:
        await self._call("connection", "request_connection")
        logger.info("Casper Signer connected")

    def bridge_in_args(self, signature: BridgeInSignature) -> RuntimeArgs:
        """Runtime arguments of ``bridge_in``, taken verbatim from the signature."""
        if not self.settings.casper_token_contract:
            raise ConfigurationError("Casper token contract is not configured")
        return RuntimeArgs.from_map({
            CasperRuntimeArgs.TOKEN_CONTRACT.value: byte_array(
                contract_hash_from_hex(self.settings.casper_token_contract)
            ),
            CasperRuntimeArgs.AMOUNT.value: u256(signature.amount),
            CasperRuntimeArgs.GAS_COMMISSION.value: u256(signature.gas_commission),
            CasperRuntimeArgs.DEADLINE.value: u256(signature.deadline),
            CasperRuntimeArgs.NONCE.value: u128(signature.nonce),
            CasperRuntimeArgs.DESTINATION_CHAIN.value: string(signature.destination.network_name),
            CasperRuntimeArgs.DESTINATION_ADDRESS.value: string(signature.destination.address),
            CasperRuntimeArgs.SIGNATURE.value: byte_array(_hex_bytes(signature.signature)),
        })

    async def _contract_call(self, entry_point: CasperEntryPoints, args: RuntimeArgs) -> dict:
        """Build a deploy calling the bridge contract and have the signer co-sign it."""
        if not self.settings.casper_bridge_contract:
            raise ConfigurationError("Casper bridge contract is not configured")
        public_key = await self.public_key()
        deploy = make_deploy(
            account=public_key,
            chain_name=self.settings.casper_chain_name,
            session=StoredContractByHash(
                contract_hash_from_hex(self.settings.casper_bridge_contract),
                entry_point.value,
                args,
            ),
            payment=standard_payment(self.settings.casper_payment_amount),
            ttl_ms=self.settings.casper_deploy_ttl_ms,
        )
        logger.debug(f"Deploy {deploy.hash.hex()} built for {entry_point.value}")
        return await self._call("deploy signature", "sign", deploy_to_json(deploy), public_key.to_hex())

    async def send_transaction(
        self,
        destination: str,
        amount: str,
        signature: Optional[BridgeInSignature] = None,
    ) -> str:
        async with wallet_operation_lock(self, operation="bridge_in"):
            if not await self.is_site_connected():
                await self.connect()

            if signature is None:
                sender_network = await self.networks.get_network_by_type(NetworkType.CASPER)
                recipient_id = self.session.recipient_network_id
                if recipient_id is None:
                    raise WalletError("Recipient network is not selected")
                recipient_network = await self.networks.get_network(recipient_id)
                if recipient_network.id == sender_network.id:
                    raise SameChainTransfer("Recipient network must differ from the Casper network")
                token = await self.networks.default_token(sender_network.id)
                request = SignatureRequest(
                    sender=NetworkAddress(address=await self.address(), network_name=sender_network.name),
                    token_id=token.id,
                    amount=amount,
                    destination=NetworkAddress(
                        address=format_destination(destination, recipient_network.is_evm),
                        network_name=recipient_network.name,
                    ),
                )
                signature = await self.transfers.signature(request)

            if signature.is_expired():
                logger.warning(f"Signature nonce={signature.nonce} expired before deploy")
                raise SignatureExpired(signature.deadline)

            signed = await self._contract_call(CasperEntryPoints.BRIDGE_IN, self.bridge_in_args(signature))
            await self.relay.bridge_in(signed, self.settings.casper_node_address)

            deploy_hash = signed.get("deploy", {}).get("hash", "")
            logger.info(
                f"bridge_in deploy relayed: {deploy_hash} "
                f"(nonce={signature.nonce}, to={shorten(signature.destination.address)})"
            )
            return deploy_hash

    async def cancel_transaction(self, request: CancelSignatureRequest) -> str:
        raise CancelNotSupportedError("Cancelling transfers from Casper is not implemented")
