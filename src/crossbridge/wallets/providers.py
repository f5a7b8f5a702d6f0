"""Injected wallet providers.

Browser wallets are external singletons (an EIP-1193 ``ethereum`` object and
the Casper Signer helper). Adapters never reach for them directly: a
``ProviderLocator`` is injected at construction time and asked for the
provider when it is needed, so tests can hand in mocks.
"""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


class ProviderRpcError(Exception):
    """Error raised by an injected provider.

    Mirrors the EIP-1193 error shape: a numeric ``code``, a message and
    optional ``data`` (revert data for failed contract calls).
    """

    def __init__(self, code: Optional[int], message: str = "", data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


# EIP-1193 / EIP-3085 error codes
USER_REJECTED_REQUEST = 4001
UNAUTHORIZED = 4100
UNRECOGNIZED_CHAIN = 4902


@runtime_checkable
class EthereumProvider(Protocol):
    """EIP-1193 provider."""

    is_metamask: bool
    providers: Optional[Sequence["EthereumProvider"]]

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        ...


@runtime_checkable
class CasperSignerProvider(Protocol):
    """Casper Signer extension helper."""

    async def is_connected(self) -> bool:
        ...

    async def request_connection(self) -> None:
        ...

    async def get_active_public_key(self) -> str:
        ...

    async def sign_message(self, message: str, public_key: str) -> str:
        ...

    async def sign(self, deploy_json: dict, public_key: str) -> dict:
        ...


class ProviderLocator:
    """Hands out the injected providers (or None when not installed)."""

    def __init__(
        self,
        ethereum: Optional[EthereumProvider] = None,
        casper_signer: Optional[CasperSignerProvider] = None,
    ):
        self._ethereum = ethereum
        self._casper_signer = casper_signer

    def ethereum(self) -> Optional[EthereumProvider]:
        return self._ethereum

    def casper_signer(self) -> Optional[CasperSignerProvider]:
        return self._casper_signer
