"""Casper public keys and account hashes.

A public key hex is a one byte algorithm tag followed by the raw key:
``01`` + 32 bytes for ed25519, ``02`` + 33 bytes (compressed) for secp256k1.
The bridge identifies accounts by account hash, never by raw key.
"""

import hashlib
from dataclasses import dataclass

ED25519_TAG = 0x01
SECP256K1_TAG = 0x02

_KEY_ALGORITHMS = {
    ED25519_TAG: ("ed25519", 32),
    SECP256K1_TAG: ("secp256k1", 33),
}


def blake2b256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


@dataclass(frozen=True)
class PublicKey:
    tag: int
    raw: bytes

    @classmethod
    def from_hex(cls, public_key_hex: str) -> "PublicKey":
        """Parse a tagged public key hex.

        Raises:
            ValueError: On unknown algorithm tag or wrong key length
        """
        data = bytes.fromhex(public_key_hex)
        if not data:
            raise ValueError("Empty public key")
        tag, raw = data[0], data[1:]
        if tag not in _KEY_ALGORITHMS:
            raise ValueError(f"Unknown public key tag: {tag:#04x}")
        algorithm, length = _KEY_ALGORITHMS[tag]
        if len(raw) != length:
            raise ValueError(f"{algorithm} public key must be {length} bytes, got {len(raw)}")
        return cls(tag=tag, raw=raw)

    @property
    def algorithm(self) -> str:
        return _KEY_ALGORITHMS[self.tag][0]

    def to_bytes(self) -> bytes:
        return bytes([self.tag]) + self.raw

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def account_hash(self) -> bytes:
        """blake2b-256 of algorithm name, a zero separator and the raw key."""
        return blake2b256(self.algorithm.encode("ascii") + b"\x00" + self.raw)


def account_hash(public_key_hex: str) -> str:
    """Derive the 64 hex character account hash of a public key."""
    return PublicKey.from_hex(public_key_hex).account_hash().hex()
