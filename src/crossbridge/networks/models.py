"""Chain directory contracts.

These models mirror the JSON returned by the gateway's ``/networks``
endpoints. They are immutable snapshots: a fresh directory query replaces
them wholesale.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NetworkType(str, Enum):
    """Chain interoperability type."""

    EVM = "EVM"
    CASPER = "CASPER"


class ChainFamily(str, Enum):
    """Transaction model family of a chain."""

    EVM = "EVM"
    NON_EVM = "NON_EVM"


class NetworkName(str, Enum):
    """Chains known to the bridge."""

    CASPER_TEST = "CASPER-TEST"
    GOERLI = "GOERLI"
    MUMBAI = "MUMBAI"
    BNB_TEST = "BNB-TEST"
    AVALANCHE_TEST = "AVALANCHE-TEST"


class Network(BaseModel):
    """A chain connected to the bridge."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., description="Server-assigned network id")
    name: str = Field(..., description="Chain name, e.g. GOERLI")
    type: NetworkType = Field(..., description="Interoperability type")
    is_testnet: bool = Field(default=True, alias="isTestnet")

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v):
        """Accept both ``NT_EVM`` and ``EVM`` spellings."""
        if isinstance(v, str) and v.upper().startswith("NT_"):
            return v.upper()[3:]
        return v

    @property
    def family(self) -> ChainFamily:
        return ChainFamily.EVM if self.type == NetworkType.EVM else ChainFamily.NON_EVM

    @property
    def is_evm(self) -> bool:
        return self.type == NetworkType.EVM


class WrappedIn(BaseModel):
    """Wrapped representation of a token on another chain."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    network_id: int = Field(..., alias="networkId")
    smart_contract_address: str = Field(..., alias="smartContractAddress")


class Token(BaseModel):
    """A token supported by the bridge."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    short_name: str = Field(..., alias="shortName")
    long_name: str = Field(default="", alias="longName")
    wraps: list[WrappedIn] = Field(default_factory=list)

    @field_validator("wraps", mode="before")
    @classmethod
    def default_wraps(cls, v):
        return v or []

    def contract_on(self, network_id: int) -> Optional[str]:
        """Get the wrapped contract address on a network, if any."""
        for wrap in self.wraps:
            if wrap.network_id == network_id:
                return wrap.smart_contract_address
        return None
