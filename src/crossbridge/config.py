"""Application configuration using pydantic-settings.

Contract addresses, node addresses and gas ceilings for every supported
chain are read from the environment, so adding a chain is a configuration
change rather than a code change.
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required chain or contract setting is missing."""
    pass


class EvmContracts(BaseModel):
    """Token and bridge contract addresses deployed on one EVM chain."""

    token_contract: str = Field(..., description="ERC20 token contract address")
    bridge_contract: str = Field(..., description="Bridge contract address")


DEFAULT_EVM_CHAIN_IDS = {
    "GOERLI": "0x5",
    "MUMBAI": "0x13881",
    "BNB-TEST": "0x61",
    "AVALANCHE-TEST": "0xa869",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Gateway
    # ======================
    gateway_address: str = Field(
        default="http://localhost:8088", description="Bridge gateway origin"
    )
    api_root: str = Field(default="/api/v0", description="REST API base path")
    relay_address: Optional[str] = Field(
        default=None, description="Deploy relay origin (defaults to gateway)"
    )
    http_timeout: Optional[float] = Field(
        default=None, description="HTTP timeout in seconds (None = no timeout)"
    )

    # ======================
    # EVM Chains
    # ======================
    eth_gas_limit: int = Field(
        default=300000, description="Gas ceiling for bridge contract calls"
    )
    evm_contracts: dict[str, EvmContracts] = Field(
        default_factory=dict,
        description="Chain name -> token/bridge contract addresses (JSON)",
    )
    evm_chain_ids: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_EVM_CHAIN_IDS),
        description="Chain name -> hex chain id",
    )
    evm_token_decimals: int = Field(
        default=18, description="Decimals of the bridged ERC20 token"
    )

    # ======================
    # Casper
    # ======================
    casper_node_address: str = Field(
        default="http://localhost:7777/rpc", description="Casper RPC node address"
    )
    casper_bridge_contract: str = Field(
        default="", description="Casper bridge contract hash (hex)"
    )
    casper_token_contract: str = Field(
        default="", description="Casper token contract hash (hex)"
    )
    casper_chain_name: str = Field(
        default="casper-test", description="Casper chain name used in deploys"
    )
    casper_payment_amount: int = Field(
        default=40000000000, description="Standard payment for bridge deploys (motes)"
    )
    casper_deploy_ttl_ms: int = Field(
        default=30 * 60 * 1000, description="Deploy time-to-live in milliseconds"
    )
    casper_signer_install_url: str = Field(
        default="https://chrome.google.com/webstore/detail/casper-signer/djhndpeocffgkbpbceeplfohjlkcfcbn",
        description="Where to send users without the signer extension",
    )

    # ======================
    # History
    # ======================
    history_page_size: int = Field(default=5, description="Transfers per history page")

    @field_validator("evm_contracts", "evm_chain_ids", mode="before")
    @classmethod
    def upper_chain_names(cls, v):
        """Chain names are matched upper-case."""
        if isinstance(v, dict):
            return {str(name).upper(): value for name, value in v.items()}
        return v

    def get_api_url(self) -> str:
        """Get the full REST API base URL."""
        return f"{self.gateway_address.rstrip('/')}{self.api_root}"

    def get_relay_url(self) -> str:
        """Get the deploy relay base URL."""
        return (self.relay_address or self.gateway_address).rstrip("/")

    def get_evm_contracts(self, chain_name: str) -> EvmContracts:
        """Get contract addresses for an EVM chain.

        Raises:
            ConfigurationError: If the chain has no contract mapping
        """
        contracts = self.evm_contracts.get(chain_name.upper())
        if contracts is None:
            raise ConfigurationError(f"No contract addresses configured for {chain_name}")
        return contracts

    def get_evm_chain_id(self, chain_name: str) -> str:
        """Get hex chain id for an EVM chain.

        Raises:
            ConfigurationError: If the chain id is unknown
        """
        chain_id = self.evm_chain_ids.get(chain_name.upper())
        if not chain_id:
            raise ConfigurationError(f"No chain id configured for {chain_name}")
        return chain_id

    def get_safe_dict(self) -> dict:
        """Return settings dict suitable for logging."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api": self.get_api_url(),
            "relay": self.get_relay_url(),
            "evm_chains": sorted(self.evm_contracts),
            "casper": {
                "node": self._redact_url(self.casper_node_address),
                "chain_name": self.casper_chain_name,
                "bridge_contract": self.casper_bridge_contract or "(not set)",
            },
            "history_page_size": self.history_page_size,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials embedded in a URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            creds, host = rest.rsplit("@", 1)
            if ":" in creds:
                user, _ = creds.split(":", 1)
                return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
