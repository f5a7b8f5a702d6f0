"""Casper deploy building blocks used by the Casper wallet adapter."""

from enum import Enum

from crossbridge.casper.deploy import Deploy, deploy_to_json, make_deploy, standard_payment
from crossbridge.casper.keys import PublicKey, account_hash


class CasperEntryPoints(str, Enum):
    """Bridge contract entry points."""
    BRIDGE_IN = "bridge_in"
    TRANSFER_OUT = "transfer_out"


class CasperRuntimeArgs(str, Enum):
    """Runtime argument names of the bridge contract."""
    AMOUNT = "amount"
    GAS_COMMISSION = "gas_commission"
    COMMISSION = "commission"
    DEADLINE = "deadline"
    DESTINATION_ADDRESS = "destination_address"
    DESTINATION_CHAIN = "destination_chain"
    NONCE = "nonce"
    TOKEN_CONTRACT = "token_contract"
    SIGNATURE = "signature"
    RECIPIENT = "recipient"


__all__ = [
    "CasperEntryPoints",
    "CasperRuntimeArgs",
    "Deploy",
    "PublicKey",
    "account_hash",
    "deploy_to_json",
    "make_deploy",
    "standard_payment",
]
