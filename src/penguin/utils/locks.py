"""Serialization of ledger mutations.

Transfers and administration calls must each observe a consistent snapshot
and run to completion before the next one starts. A single process-wide
lock provides that ordering; reads do not take it.
"""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)

_ledger_lock: Optional[asyncio.Lock] = None


def get_ledger_lock() -> asyncio.Lock:
    """Get or create the process-wide ledger lock."""
    global _ledger_lock
    if _ledger_lock is None:
        _ledger_lock = asyncio.Lock()
    return _ledger_lock


class LockTimeoutError(Exception):
    """Raised when the ledger lock cannot be acquired within the timeout period."""

    pass


class LedgerLock:
    """Context manager for exclusive access to the ledger.

    Wrap the whole session scope, commit included, so that no other
    mutation can interleave with it.

    Example:
        async with LedgerLock(operation="transfer"):
            async with get_db() as session:
                await TransferService(session).transfer(sender, to, amount)
    """

    def __init__(self, timeout: Optional[float] = 30.0, operation: str = "ledger_operation"):
        """Initialize the lock.

        Args:
            timeout: Maximum time to wait for lock (None = wait forever)
            operation: Description of the operation for logging
        """
        self.timeout = timeout
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "LedgerLock":
        """Acquire the lock."""
        self._lock = get_ledger_lock()

        try:
            if self.timeout:
                await asyncio.wait_for(self._lock.acquire(), timeout=self.timeout)
            else:
                await self._lock.acquire()
            self._acquired = True
        except asyncio.TimeoutError:
            logger.warning(f"Ledger lock timeout after {self.timeout}s: {self.operation}")
            raise LockTimeoutError(
                f"Could not acquire ledger lock within {self.timeout}s for {self.operation}"
            )

        logger.debug(f"Ledger lock acquired: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release the lock."""
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"Ledger lock released: {self.operation}")
        return False


def reset_ledger_lock() -> None:
    """Drop the lock so the next event loop gets a fresh one (useful for testing)."""
    global _ledger_lock
    _ledger_lock = None
