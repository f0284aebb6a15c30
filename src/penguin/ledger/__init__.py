"""Ledger module for token balances, configuration and transfer history."""

from penguin.ledger.database import get_db, init_db
from penguin.ledger.models import (
    MAX_UINT256,
    Account,
    LiquidityEvent,
    TokenConfig,
    TransferRecord,
)
from penguin.ledger.repository import LedgerRepository

__all__ = [
    # Models
    "Account",
    "LiquidityEvent",
    "TokenConfig",
    "TransferRecord",
    "MAX_UINT256",
    # Database
    "get_db",
    "init_db",
    "LedgerRepository",
]
