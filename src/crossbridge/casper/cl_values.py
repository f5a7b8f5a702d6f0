"""CLValue serialization for Casper deploys.

Only the value types the bridge contract takes are supported. Byte layout:

- integers: u32/u64 little-endian, fixed width
- U128/U256/U512: one length byte followed by the minimal little-endian bytes
- String: u32 length + UTF-8 bytes
- ByteArray(N): raw bytes, the length is part of the type
- CLValue: u32 length + value bytes + type tag (+ u32 N for ByteArray)
"""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union


class CLType(IntEnum):
    """CLType tags."""
    U128 = 6
    U256 = 7
    U512 = 8
    STRING = 10
    BYTE_ARRAY = 15


_BIG_UINT_BITS = {CLType.U128: 128, CLType.U256: 256, CLType.U512: 512}


def serialize_u32(value: int) -> bytes:
    return struct.pack("<I", value)


def serialize_u64(value: int) -> bytes:
    return struct.pack("<Q", value)


def serialize_bytes(data: bytes) -> bytes:
    """Length-prefixed byte string."""
    return serialize_u32(len(data)) + data


def serialize_string(value: str) -> bytes:
    return serialize_bytes(value.encode("utf-8"))


def serialize_big_uint(value: int, bits: int) -> bytes:
    """Serialize a U128/U256/U512 value.

    Raises:
        ValueError: If the value is negative or does not fit
    """
    if value < 0:
        raise ValueError(f"Unsigned value expected, got {value}")
    if value >= 1 << bits:
        raise ValueError(f"Value {value} does not fit in {bits} bits")
    length = (value.bit_length() + 7) // 8
    return bytes([length]) + value.to_bytes(length, "little")


@dataclass(frozen=True)
class CLValue:
    """A serialized value together with its type."""

    cl_type: CLType
    data: bytes
    parsed: Any
    size: int = 0  # ByteArray length

    def type_bytes(self) -> bytes:
        if self.cl_type == CLType.BYTE_ARRAY:
            return bytes([self.cl_type]) + serialize_u32(self.size)
        return bytes([self.cl_type])

    def to_bytes(self) -> bytes:
        return serialize_bytes(self.data) + self.type_bytes()

    def to_json(self) -> dict:
        if self.cl_type == CLType.BYTE_ARRAY:
            cl_type: Union[str, dict] = {"ByteArray": self.size}
        elif self.cl_type == CLType.STRING:
            cl_type = "String"
        else:
            cl_type = self.cl_type.name
        return {"cl_type": cl_type, "bytes": self.data.hex(), "parsed": self.parsed}


def _big_uint(cl_type: CLType, value: Union[int, str]) -> CLValue:
    number = int(value)
    return CLValue(cl_type, serialize_big_uint(number, _BIG_UINT_BITS[cl_type]), str(number))


def u128(value: Union[int, str]) -> CLValue:
    return _big_uint(CLType.U128, value)


def u256(value: Union[int, str]) -> CLValue:
    return _big_uint(CLType.U256, value)


def u512(value: Union[int, str]) -> CLValue:
    return _big_uint(CLType.U512, value)


def string(value: str) -> CLValue:
    return CLValue(CLType.STRING, serialize_string(value), value)


def byte_array(data: bytes) -> CLValue:
    return CLValue(CLType.BYTE_ARRAY, bytes(data), data.hex(), size=len(data))


@dataclass
class RuntimeArgs:
    """Ordered named arguments of a contract call."""

    args: list[tuple[str, CLValue]] = field(default_factory=list)

    @classmethod
    def from_map(cls, values: dict[str, CLValue]) -> "RuntimeArgs":
        return cls(list(values.items()))

    def get(self, name: str) -> CLValue:
        for arg_name, value in self.args:
            if arg_name == name:
                return value
        raise KeyError(name)

    def to_bytes(self) -> bytes:
        out = serialize_u32(len(self.args))
        for name, value in self.args:
            out += serialize_string(name) + value.to_bytes()
        return out

    def to_json(self) -> list:
        return [[name, value.to_json()] for name, value in self.args]
