"""Casper deploy construction.

A deploy is a header, a payment item and a session item. The body hash
covers payment and session; the deploy hash covers the header. The JSON
produced by ``deploy_to_json`` is what signer extensions and the deploy
relay accept.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from crossbridge.casper.cl_values import (
    RuntimeArgs,
    serialize_bytes,
    serialize_string,
    serialize_u32,
    serialize_u64,
    u512,
)
from crossbridge.casper.keys import PublicKey, blake2b256

DEFAULT_TTL_MS = 30 * 60 * 1000
DEFAULT_GAS_PRICE = 1

_TTL_UNITS = (
    ("day", 24 * 60 * 60 * 1000),
    ("h", 60 * 60 * 1000),
    ("m", 60 * 1000),
    ("s", 1000),
)


@dataclass
class ModuleBytes:
    """Wasm module session or payment. Empty module means standard payment."""

    TAG = 0

    module_bytes: bytes
    args: RuntimeArgs

    def to_bytes(self) -> bytes:
        return bytes([self.TAG]) + serialize_bytes(self.module_bytes) + self.args.to_bytes()

    def to_json(self) -> dict:
        return {"ModuleBytes": {"module_bytes": self.module_bytes.hex(), "args": self.args.to_json()}}


@dataclass
class StoredContractByHash:
    """Call of a named entry point on a stored contract."""

    TAG = 1

    contract_hash: bytes
    entry_point: str
    args: RuntimeArgs

    def __post_init__(self):
        if len(self.contract_hash) != 32:
            raise ValueError(f"Contract hash must be 32 bytes, got {len(self.contract_hash)}")

    def to_bytes(self) -> bytes:
        return (
            bytes([self.TAG])
            + self.contract_hash
            + serialize_string(self.entry_point)
            + self.args.to_bytes()
        )

    def to_json(self) -> dict:
        return {
            "StoredContractByHash": {
                "hash": self.contract_hash.hex(),
                "entry_point": self.entry_point,
                "args": self.args.to_json(),
            }
        }


ExecutableDeployItem = Union[ModuleBytes, StoredContractByHash]


def standard_payment(amount: int) -> ModuleBytes:
    """Payment item paying a fixed amount of motes."""
    return ModuleBytes(b"", RuntimeArgs([("amount", u512(amount))]))


def contract_hash_from_hex(contract_hash: str) -> bytes:
    """Parse a contract hash, tolerating a ``hash-`` prefix."""
    if contract_hash.startswith("hash-"):
        contract_hash = contract_hash[len("hash-"):]
    return bytes.fromhex(contract_hash)


@dataclass
class DeployHeader:
    account: PublicKey
    timestamp_ms: int
    ttl_ms: int
    gas_price: int
    body_hash: bytes
    chain_name: str
    dependencies: list[bytes] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        out = (
            self.account.to_bytes()
            + serialize_u64(self.timestamp_ms)
            + serialize_u64(self.ttl_ms)
            + serialize_u64(self.gas_price)
            + self.body_hash
            + serialize_u32(len(self.dependencies))
        )
        for dependency in self.dependencies:
            out += dependency
        return out + serialize_string(self.chain_name)

    def to_json(self) -> dict:
        return {
            "account": self.account.to_hex(),
            "timestamp": format_timestamp(self.timestamp_ms),
            "ttl": humanize_ttl(self.ttl_ms),
            "gas_price": self.gas_price,
            "body_hash": self.body_hash.hex(),
            "dependencies": [d.hex() for d in self.dependencies],
            "chain_name": self.chain_name,
        }


@dataclass
class Deploy:
    hash: bytes
    header: DeployHeader
    payment: ExecutableDeployItem
    session: ExecutableDeployItem
    approvals: list[dict] = field(default_factory=list)


def format_timestamp(timestamp_ms: int) -> str:
    """Format milliseconds since epoch as ``2023-01-31T12:00:00.000Z``."""
    moment = datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{timestamp_ms % 1000:03d}Z"


def humanize_ttl(ttl_ms: int) -> str:
    """Format a TTL the way nodes print it (``30m``, ``1h``, ``1day``)."""
    for unit, size in _TTL_UNITS:
        if ttl_ms >= size and ttl_ms % size == 0:
            return f"{ttl_ms // size}{unit}"
    return f"{ttl_ms}ms"


def make_deploy(
    account: PublicKey,
    chain_name: str,
    session: ExecutableDeployItem,
    payment: ExecutableDeployItem,
    gas_price: int = DEFAULT_GAS_PRICE,
    ttl_ms: int = DEFAULT_TTL_MS,
    timestamp_ms: Optional[int] = None,
) -> Deploy:
    """Build an unsigned deploy.

    Args:
        account: Public key of the deploy's account
        chain_name: Network name, e.g. ``casper-test``
        session: Item to execute
        payment: Payment item, usually ``standard_payment``
        gas_price: Gas price multiplier
        ttl_ms: Time to live in milliseconds
        timestamp_ms: Creation time, now when omitted

    Returns:
        Deploy with computed body and deploy hashes and no approvals
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    body_hash = blake2b256(payment.to_bytes() + session.to_bytes())
    header = DeployHeader(
        account=account,
        timestamp_ms=timestamp_ms,
        ttl_ms=ttl_ms,
        gas_price=gas_price,
        body_hash=body_hash,
        chain_name=chain_name,
    )
    return Deploy(
        hash=blake2b256(header.to_bytes()),
        header=header,
        payment=payment,
        session=session,
    )


def deploy_to_json(deploy: Deploy) -> dict:
    """Render a deploy in the ``{"deploy": {...}}`` shape signers accept."""
    return {
        "deploy": {
            "hash": deploy.hash.hex(),
            "header": deploy.header.to_json(),
            "payment": deploy.payment.to_json(),
            "session": deploy.session.to_json(),
            "approvals": list(deploy.approvals),
        }
    }
