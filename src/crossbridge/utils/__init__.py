"""Utility modules for crossbridge."""

from crossbridge.utils.locks import LockTimeoutError, get_wallet_lock, wallet_operation_lock

__all__ = ["LockTimeoutError", "get_wallet_lock", "wallet_operation_lock"]
