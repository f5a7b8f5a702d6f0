"""Bridge and ERC20 contract call encoding.

Only the three calls the client makes are encoded here (ERC20 ``approve``,
bridge ``bridgeIn`` and bridge ``transferOut``), plus decoding of the
bridge's custom errors from revert data.
"""

from typing import Optional, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import add_0x_prefix, function_signature_to_4byte_selector, to_bytes
from web3 import Web3

APPROVE_SIGNATURE = "approve(address,uint256)"
BRIDGE_IN_SIGNATURE = "bridgeIn(address,uint256,uint256,string,string,uint256,uint256,bytes)"
TRANSFER_OUT_SIGNATURE = "transferOut(address,address,uint256,uint256,uint256,bytes)"

# Custom errors declared by the bridge contract (no arguments)
BRIDGE_ERRORS = (
    "AlreadyUsedSignature",
    "AmountExceedBridgePool",
    "AmountExceedCommissionPool",
    "ExpiredSignature",
    "InvalidSignature",
)

ERROR_STRING_SELECTOR = function_signature_to_4byte_selector("Error(string)")

_ERRORS_BY_SELECTOR = {
    function_signature_to_4byte_selector(f"{name}()"): name for name in BRIDGE_ERRORS
}


def _hexstr_to_bytes(value: str) -> bytes:
    return to_bytes(hexstr=value)


def _address(value: str) -> str:
    """Checksum an address; the gateway sends some without the 0x prefix."""
    return Web3.to_checksum_address(add_0x_prefix(value))


def _calldata(signature: str, types: list[str], args: list) -> str:
    selector = function_signature_to_4byte_selector(signature)
    return "0x" + (selector + encode(types, args)).hex()


def encode_approve(spender: str, amount_wei: int) -> str:
    """Encode ``approve(spender, amount)`` calldata."""
    return _calldata(
        APPROVE_SIGNATURE,
        ["address", "uint256"],
        [_address(spender), amount_wei],
    )


def encode_bridge_in(
    token: str,
    amount: Union[int, str],
    gas_commission: Union[int, str],
    destination_chain: str,
    destination_address: str,
    deadline: Union[int, str],
    nonce: int,
    signature: str,
) -> str:
    """Encode ``bridgeIn`` calldata from signature response fields.

    Integer fields are accepted as decimal strings, as the gateway sends them.
    """
    return _calldata(
        BRIDGE_IN_SIGNATURE,
        ["address", "uint256", "uint256", "string", "string", "uint256", "uint256", "bytes"],
        [
            _address(token),
            int(amount),
            int(gas_commission),
            destination_chain,
            destination_address,
            int(deadline),
            int(nonce),
            _hexstr_to_bytes(signature),
        ],
    )


def encode_transfer_out(
    token: str,
    recipient: str,
    amount: Union[int, str],
    commission: Union[int, str],
    nonce: int,
    signature: str,
) -> str:
    """Encode ``transferOut`` calldata from cancel signature fields."""
    return _calldata(
        TRANSFER_OUT_SIGNATURE,
        ["address", "address", "uint256", "uint256", "uint256", "bytes"],
        [
            _address(token),
            _address(recipient),
            int(amount),
            int(commission),
            int(nonce),
            _hexstr_to_bytes(signature),
        ],
    )


def decode_revert_reason(data) -> Optional[str]:
    """Decode revert data into a reason.

    Returns the bridge error name, the message of a ``require`` failure, or
    None when the data is absent or unrecognized.
    """
    if isinstance(data, dict):
        # Some providers nest the revert payload
        data = data.get("data")
    if not isinstance(data, str) or not data.startswith("0x"):
        return None
    try:
        raw = _hexstr_to_bytes(data)
    except ValueError:
        return None
    if len(raw) < 4:
        return None

    selector, payload = raw[:4], raw[4:]
    if selector in _ERRORS_BY_SELECTOR:
        return _ERRORS_BY_SELECTOR[selector]
    if selector == ERROR_STRING_SELECTOR:
        try:
            (message,) = decode(["string"], payload)
        except DecodingError:
            return None
        return message
    return None
