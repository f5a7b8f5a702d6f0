"""Account identifier validation per chain family.

EVM accounts are ``0x`` followed by 40 hex characters. Casper accounts are
identified by a 64 hex character account hash; the bridge may carry them
with an ``account-hash-`` tag which callers strip before validating.

All functions are pure and never raise on malformed input.
"""

import re

ACCOUNT_HASH_PREFIX = "account-hash-"

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_ACCOUNT_HASH_RE = re.compile(r"^[a-fA-F0-9]{64}$")


def validate_evm_address(address: str) -> bool:
    """Check EVM address format (case-insensitive hex)."""
    if not isinstance(address, str):
        return False
    return _EVM_ADDRESS_RE.fullmatch(address) is not None


def validate_account_hash(account_hash: str) -> bool:
    """Check Casper account hash format (64 hex chars, no prefix)."""
    if not isinstance(account_hash, str):
        return False
    return _ACCOUNT_HASH_RE.fullmatch(account_hash) is not None


def has_account_hash_prefix(address: str) -> bool:
    return isinstance(address, str) and address.startswith(ACCOUNT_HASH_PREFIX)


def strip_account_hash_prefix(address: str) -> str:
    """Remove the ``account-hash-`` tag if present."""
    if has_account_hash_prefix(address):
        return address[len(ACCOUNT_HASH_PREFIX):]
    return address


def to_account_hash_address(account_hash: str) -> str:
    """Add the ``account-hash-`` tag expected by the bridge contracts."""
    return f"{ACCOUNT_HASH_PREFIX}{strip_account_hash_prefix(account_hash)}"


def validate_for_family(address: str, is_evm: bool) -> bool:
    """Validate an address for the given chain family.

    The account-hash tag is tolerated for non-EVM addresses and rejected for
    EVM ones.
    """
    if is_evm:
        return validate_evm_address(address)
    return validate_account_hash(strip_account_hash_prefix(address))


def shorten(address: str) -> str:
    """Shorten an address for log output."""
    return address[:10] + "..." if len(address) > 10 else address


def format_destination(address: str, is_evm: bool) -> str:
    """Destination address as the bridge contracts expect it.

    Casper destinations carry the ``account-hash-`` tag, EVM ones are sent as is.
    """
    if is_evm:
        return address
    return to_account_hash_address(address)
