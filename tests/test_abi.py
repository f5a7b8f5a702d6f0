"""Tests for contract call encoding and revert decoding."""

import pytest
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from crossbridge.wallets.abi import (
    BRIDGE_ERRORS,
    ERROR_STRING_SELECTOR,
    decode_revert_reason,
    encode_approve,
    encode_bridge_in,
    encode_transfer_out,
)

BRIDGE = "0x" + "22" * 20
TOKEN = "0x" + "11" * 20
RECIPIENT = "0x" + "ab" * 20


def _args(calldata: str, types: list[str]) -> tuple:
    return decode(types, bytes.fromhex(calldata[10:]))


class TestApprove:
    """Tests for ERC20 approve encoding."""

    def test_selector(self):
        data = encode_approve(BRIDGE, 10 ** 18)
        assert data.startswith("0x095ea7b3")

    def test_arguments(self):
        spender, amount = _args(encode_approve(BRIDGE, 5 * 10 ** 17), ["address", "uint256"])
        assert spender.lower() == BRIDGE
        assert amount == 5 * 10 ** 17


class TestBridgeIn:
    """Tests for bridgeIn encoding."""

    TYPES = ["address", "uint256", "uint256", "string", "string", "uint256", "uint256", "bytes"]

    def test_selector(self):
        data = encode_bridge_in(TOKEN, "1", "1", "CASPER-TEST", "x", "1", 1, "0x00")
        selector = function_signature_to_4byte_selector(
            "bridgeIn(address,uint256,uint256,string,string,uint256,uint256,bytes)"
        )
        assert data[2:10] == selector.hex()

    def test_fields_passed_verbatim(self):
        destination = "account-hash-" + "ef" * 32
        data = encode_bridge_in(
            TOKEN,
            "500000000000000000",
            "1000",
            "CASPER-TEST",
            destination,
            "1700000000",
            7,
            "0x" + "12" * 65,
        )

        token, amount, commission, chain, address, deadline, nonce, signature = _args(data, self.TYPES)
        assert token.lower() == TOKEN
        assert amount == 500000000000000000
        assert commission == 1000
        assert chain == "CASPER-TEST"
        assert address == destination
        assert deadline == 1700000000
        assert nonce == 7
        assert signature == bytes.fromhex("12" * 65)

    def test_token_without_prefix(self):
        """The gateway sends token addresses without 0x."""
        data = encode_bridge_in("11" * 20, "1", "1", "GOERLI", RECIPIENT, "1", 1, "0x00")
        token = _args(data, self.TYPES)[0]
        assert token.lower() == TOKEN


class TestTransferOut:
    """Tests for transferOut encoding."""

    def test_fields(self):
        data = encode_transfer_out("11" * 20, RECIPIENT, "100", "10", 3, "0x" + "34" * 65)

        selector = function_signature_to_4byte_selector(
            "transferOut(address,address,uint256,uint256,uint256,bytes)"
        )
        assert data[2:10] == selector.hex()
        token, recipient, amount, commission, nonce, signature = _args(
            data, ["address", "address", "uint256", "uint256", "uint256", "bytes"]
        )
        assert token.lower() == TOKEN
        assert recipient.lower() == RECIPIENT
        assert amount == 100
        assert commission == 10
        assert nonce == 3
        assert signature == bytes.fromhex("34" * 65)


class TestRevertDecoding:
    """Tests for revert data decoding."""

    @pytest.mark.parametrize("name", BRIDGE_ERRORS)
    def test_bridge_errors(self, name):
        data = "0x" + function_signature_to_4byte_selector(f"{name}()").hex()
        assert decode_revert_reason(data) == name

    def test_error_string(self):
        data = "0x" + (ERROR_STRING_SELECTOR + encode(["string"], ["amount too low"])).hex()
        assert decode_revert_reason(data) == "amount too low"

    def test_nested_payload(self):
        data = "0x" + function_signature_to_4byte_selector("ExpiredSignature()").hex()
        assert decode_revert_reason({"code": 3, "data": data}) == "ExpiredSignature"

    @pytest.mark.parametrize("data", [
        None,
        "",
        "0x",
        "0x1234",
        "deadbeef",
        "0xdeadbeef",
        {"message": "no data"},
    ])
    def test_unrecognized(self, data):
        assert decode_revert_reason(data) is None

    def test_truncated_error_string(self):
        data = "0x" + (ERROR_STRING_SELECTOR + b"\x00" * 3).hex()
        assert decode_revert_reason(data) is None
