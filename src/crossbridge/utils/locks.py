"""Per-wallet serialization of signing operations.

External signer prompts are modal, so two transfers racing through the same
wallet adapter would interleave provider requests. Operations that prompt
the signer are run under one lock per adapter instance.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)

# Lock registry: adapter -> asyncio.Lock, dropped with the adapter
_wallet_locks: "weakref.WeakKeyDictionary[object, asyncio.Lock]" = weakref.WeakKeyDictionary()


def get_wallet_lock(wallet: object) -> asyncio.Lock:
    """Get or create the lock for a wallet adapter."""
    lock = _wallet_locks.get(wallet)
    if lock is None:
        lock = asyncio.Lock()
        _wallet_locks[wallet] = lock
    return lock


class LockTimeoutError(Exception):
    """Raised when a wallet lock cannot be acquired within the timeout period."""

    pass


@asynccontextmanager
async def wallet_operation_lock(
    wallet: object,
    timeout: Optional[float] = None,
    operation: str = "wallet_operation",
):
    """Run the enclosed block exclusively for one wallet adapter.

    Args:
        wallet: Adapter instance
        timeout: Maximum time to wait for the lock (None = wait forever)
        operation: Description for logging

    Example:
        async with wallet_operation_lock(self, operation="bridge_in"):
            await self._bridge_in(...)
    """
    name = type(wallet).__name__
    lock = get_wallet_lock(wallet)

    try:
        if timeout:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        else:
            await lock.acquire()
    except asyncio.TimeoutError:
        logger.warning(f"Lock timeout for {name} after {timeout}s: {operation}")
        raise LockTimeoutError(f"Could not acquire wallet lock within {timeout}s")

    logger.debug(f"Lock acquired for {name}: {operation}")
    try:
        yield
    finally:
        lock.release()
        logger.debug(f"Lock released for {name}: {operation}")


def clear_wallet_locks() -> None:
    """Clear all wallet locks (useful for testing)."""
    _wallet_locks.clear()
