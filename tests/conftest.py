"""Pytest configuration and fixtures."""

import json
import os
import time
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["GATEWAY_ADDRESS"] = "http://gateway.test"
os.environ["EVM_CONTRACTS"] = json.dumps({
    "GOERLI": {
        "token_contract": "0x" + "11" * 20,
        "bridge_contract": "0x" + "22" * 20,
    },
})

from crossbridge.config import Settings
from crossbridge.networks.models import Network, Token
from crossbridge.networks.service import NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.models import BridgeInSignature, CancelSignature
from crossbridge.transfers.service import TransfersService
from crossbridge.utils.locks import clear_wallet_locks
from crossbridge.wallets.providers import ProviderLocator, ProviderRpcError

EVM_ACCOUNT = "0x" + "ab" * 20
GOERLI_TOKEN = "0x" + "11" * 20
GOERLI_BRIDGE = "0x" + "22" * 20
CASPER_PUBLIC_KEY = "01" + "aa" * 32
CASPER_BRIDGE_CONTRACT = "bc" * 32
CASPER_TOKEN_CONTRACT = "cd" * 32
CASPER_ACCOUNT_HASH = "ef" * 32
CASPER_NODE = "http://node.test:7777/rpc"


class FakeEthereumProvider:
    """EIP-1193 provider recording every request."""

    def __init__(self, account: str = EVM_ACCOUNT, is_metamask: bool = True, providers=None):
        self.account = account
        self.is_metamask = is_metamask
        self.providers = providers
        self.calls: list[tuple[str, Optional[list]]] = []
        self.errors: dict[str, Exception] = {}
        self._tx_count = 0

    async def request(self, method: str, params: Optional[list] = None):
        self.calls.append((method, params))
        if method in self.errors:
            raise self.errors[method]
        if method in ("eth_accounts", "eth_requestAccounts"):
            return [self.account]
        if method == "personal_sign":
            return "0x" + "5a" * 65
        if method == "wallet_switchEthereumChain":
            return None
        if method == "eth_sendTransaction":
            self._tx_count += 1
            return "0x" + f"{self._tx_count:064x}"
        raise ProviderRpcError(4200, f"Unsupported method {method}")

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def sent_transactions(self) -> list[dict]:
        return [params[0] for method, params in self.calls if method == "eth_sendTransaction"]


def make_casper_signer(connected: bool = True, public_key: str = CASPER_PUBLIC_KEY) -> MagicMock:
    """Casper Signer mock; ``sign`` returns the deploy with one approval."""

    def sign(deploy_json: dict, signer_key: str) -> dict:
        deploy = dict(deploy_json["deploy"])
        deploy["approvals"] = [{"signer": signer_key, "signature": "01" + "00" * 64}]
        return {"deploy": deploy}

    signer = MagicMock()
    signer.is_connected = AsyncMock(return_value=connected)
    signer.request_connection = AsyncMock(return_value=None)
    signer.get_active_public_key = AsyncMock(return_value=public_key)
    signer.sign_message = AsyncMock(return_value="casper-message-signature")
    signer.sign = AsyncMock(side_effect=sign)
    return signer


@pytest.fixture(autouse=True)
def reset_wallet_locks():
    """Locks are bound to the event loop of the test that created them."""
    clear_wallet_locks()
    yield
    clear_wallet_locks()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        gateway_address="http://gateway.test",
        relay_address="http://relay.test",
        evm_contracts={
            "GOERLI": {"token_contract": GOERLI_TOKEN, "bridge_contract": GOERLI_BRIDGE},
        },
        casper_node_address=CASPER_NODE,
        casper_bridge_contract=CASPER_BRIDGE_CONTRACT,
        casper_token_contract=CASPER_TOKEN_CONTRACT,
    )


@pytest.fixture
def casper_network() -> Network:
    return Network(id=0, name="CASPER-TEST", type="NT_CASPER", isTestnet=True)


@pytest.fixture
def goerli() -> Network:
    return Network(id=1, name="GOERLI", type="NT_EVM", isTestnet=True)


@pytest.fixture
def mumbai() -> Network:
    return Network(id=2, name="MUMBAI", type="NT_EVM", isTestnet=True)


@pytest.fixture
def token() -> Token:
    return Token.model_validate({
        "id": 0,
        "shortName": "TST",
        "longName": "Test Token",
        "wraps": [
            {"networkId": 0, "smartContractAddress": CASPER_TOKEN_CONTRACT},
            {"networkId": 1, "smartContractAddress": GOERLI_TOKEN},
        ],
    })


@pytest.fixture
def networks_service(casper_network, goerli, mumbai, token) -> NetworksService:
    """Directory service over a mocked client."""
    client = MagicMock()
    client.connected = AsyncMock(return_value=[casper_network, goerli, mumbai])
    client.supported_tokens = AsyncMock(return_value=[token])
    return NetworksService(client)


@pytest.fixture
def transfers_service() -> MagicMock:
    return MagicMock(spec=TransfersService)


@pytest.fixture
def session() -> SessionState:
    return SessionState()


@pytest.fixture
def ethereum() -> FakeEthereumProvider:
    return FakeEthereumProvider()


@pytest.fixture
def casper_signer() -> MagicMock:
    return make_casper_signer()


@pytest.fixture
def locator(ethereum, casper_signer) -> ProviderLocator:
    return ProviderLocator(ethereum=ethereum, casper_signer=casper_signer)


@pytest.fixture
def make_signature():
    """Factory for bridge-in signatures; deadline one hour ahead by default."""

    def factory(nonce: int = 7, deadline: Optional[int] = None, **overrides) -> BridgeInSignature:
        data = {
            "token": "11" * 20,
            "amount": "500000000000000000",
            "gasComission": "1000",
            "destination": {
                "address": "account-hash-" + CASPER_ACCOUNT_HASH,
                "networkName": "CASPER-TEST",
            },
            "deadline": str(deadline if deadline is not None else int(time.time()) + 3600),
            "nonce": nonce,
            "signature": "0x" + "12" * 65,
        }
        data.update(overrides)
        return BridgeInSignature.model_validate(data)

    return factory


@pytest.fixture
def cancel_signature() -> CancelSignature:
    return CancelSignature(
        status="CONFIRMING",
        nonce=3,
        signature="0x" + "34" * 65,
        token="11" * 20,
        recipient=EVM_ACCOUNT,
        commission="10",
        amount="100",
    )
