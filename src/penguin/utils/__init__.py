"""Utility modules for Penguin."""

from penguin.utils.locks import LedgerLock, LockTimeoutError, get_ledger_lock

__all__ = ["LedgerLock", "LockTimeoutError", "get_ledger_lock"]
