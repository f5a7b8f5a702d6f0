"""Transfer protocol contracts.

Monetary values are decimal strings end to end. Nothing in this module
converts them to floats; adapters convert to chain integers only when
building a contract call.
"""

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransferStatus(str, Enum):
    """Backend-owned transfer status."""

    UNSPECIFIED = "UNSPECIFIED"
    CONFIRMING = "CONFIRMING"
    CANCELED = "CANCELED"
    FINISHED = "FINISHED"
    WAITING = "WAITING"

    @classmethod
    def parse(cls, value) -> "TransferStatus":
        """Decode a status label or numeric code."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else cls.UNSPECIFIED
        if isinstance(value, str):
            label = value.strip().upper()
            if label.startswith("STATUS_"):
                label = label[len("STATUS_"):]
            if label == "CANCELLED":
                label = "CANCELED"
            if label.isdigit():
                return cls.parse(int(label))
            try:
                return cls(label)
            except ValueError:
                return cls.UNSPECIFIED
        return cls.UNSPECIFIED


def _integer_to_str(v):
    """Big integers arrive as JSON numbers; keep them as exact decimal strings."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class NetworkAddress(_Contract):
    """An address qualified by the chain it lives on."""

    address: str
    network_name: str = Field(..., alias="networkName")


class StringTxHash(_Contract):
    hash: str = ""
    network_name: str = Field(default="", alias="networkName")


class Transfer(_Contract):
    """A transfer as recorded by the backend."""

    id: int
    amount: str
    created_at: str = Field(default="", alias="createdAt")
    sender: NetworkAddress
    recipient: NetworkAddress
    status: TransferStatus = TransferStatus.UNSPECIFIED
    outbound_tx: Optional[StringTxHash] = Field(default=None, alias="outboundTx")
    triggering_tx: Optional[StringTxHash] = Field(default=None, alias="triggeringTx")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_str(cls, v):
        return _integer_to_str(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return TransferStatus.parse(v)

    @property
    def is_cancellable(self) -> bool:
        return self.status in (TransferStatus.CONFIRMING, TransferStatus.WAITING)


class TransfersHistory(_Contract):
    """One page of transfer history."""

    limit: int
    offset: int
    total_count: int = Field(default=0, alias="totalCount")
    transfers: list[Transfer] = Field(default_factory=list)

    @field_validator("transfers", mode="before")
    @classmethod
    def default_transfers(cls, v):
        return v or []

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.transfers) < self.total_count


class TransferPagination(_Contract):
    """History query for one authenticated identity.

    The signature proves ownership of ``pub_key``; offsets advance in steps
    of ``limit``.
    """

    pub_key: str
    signature: str
    network_id: int
    offset: int = 0
    limit: int = 5

    @field_validator("offset")
    @classmethod
    def check_offset(cls, v: int) -> int:
        if v < 0:
            raise ValueError("offset must not be negative")
        return v

    @field_validator("limit")
    @classmethod
    def check_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("limit must be positive")
        return v

    @property
    def page_number(self) -> int:
        return self.offset // self.limit

    def page(self, number: int) -> "TransferPagination":
        """Get the query for a zero-based page number."""
        if number < 0:
            raise ValueError("page number must not be negative")
        return self.model_copy(update={"offset": number * self.limit})

    def next_page(self) -> "TransferPagination":
        return self.page(self.page_number + 1)


class TransferEstimateRequest(_Contract):
    sender_network: str
    recipient_network: str
    token_id: int
    amount: str


class TransferEstimate(_Contract):
    """Approximate fee and confirmation time for a transfer."""

    fee: str
    fee_percentage: str = Field(..., alias="feePercentage")
    estimated_confirmation_time: str = Field(..., alias="estimatedConfirmationTime")


class SignatureRequest(_Contract):
    """Body of ``POST /transfers/bridge-in-signature``."""

    sender: NetworkAddress
    token_id: int = Field(..., alias="tokenId")
    amount: str
    destination: NetworkAddress

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class BridgeInSignature(_Contract):
    """Server-issued authorization for one bridge-in call.

    Consumed once on chain; rejected on chain after ``deadline`` or when the
    nonce was already used.
    """

    token: str
    amount: str
    gas_commission: str = Field(..., alias="gasComission")
    destination: NetworkAddress
    deadline: str
    nonce: int
    signature: str

    @field_validator("amount", "gas_commission", "deadline", mode="before")
    @classmethod
    def integers_to_str(cls, v):
        return _integer_to_str(v)

    def expires_at(self) -> int:
        return int(self.deadline)

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the deadline has passed."""
        current = time.time() if now is None else now
        try:
            return self.expires_at() <= current
        except ValueError:
            return True


class CancelSignatureRequest(_Contract):
    """Parameters of ``GET /transfers/cancel-signature/...``."""

    transfer_id: int
    network_id: int
    signature: str
    public_key: str


class CancelSignature(_Contract):
    """Server-issued authorization for one transfer-out call."""

    status: str = ""
    nonce: int
    signature: str
    token: str
    recipient: str
    commission: str
    amount: str
