"""Token services: transfers, administration, deployment and liquidity."""

from penguin.services.admin import AdminService
from penguin.services.liquidity import LiquidityManager
from penguin.services.token import AccountInfo, TokenService
from penguin.services.transfer import (
    Clock,
    TransferResult,
    TransferService,
    check_address,
    system_clock,
)

__all__ = [
    "AccountInfo",
    "AdminService",
    "Clock",
    "LiquidityManager",
    "TokenService",
    "TransferResult",
    "TransferService",
    "check_address",
    "system_clock",
]
