"""Immutable view of the token configuration used for policy evaluation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from penguin.ledger.models import TokenConfig

BPS_DENOMINATOR = 10000


class FeeMode(str, Enum):
    """How the tax is charged relative to the transfer amount."""

    INCLUSIVE = "inclusive"  # receiver gets amount - tax
    SURCHARGE = "surcharge"  # sender pays amount + tax


@dataclass(frozen=True)
class ConfigSnapshot:
    """Configuration as read once at the start of an operation."""

    version: int
    owner: str
    liquidity_manager: Optional[str]
    tax_rate_bps: int
    fee_mode: FeeMode
    daily_max_trade_amount: int
    daily_trade_limit_count: int
    trade_window_seconds: int

    @classmethod
    def from_config(cls, config: TokenConfig) -> "ConfigSnapshot":
        return cls(
            version=config.version,
            owner=config.owner,
            liquidity_manager=config.liquidity_manager,
            tax_rate_bps=config.tax_rate_bps,
            fee_mode=FeeMode(config.fee_mode),
            daily_max_trade_amount=config.daily_max_trade_amount,
            daily_trade_limit_count=config.daily_trade_limit_count,
            trade_window_seconds=config.trade_window_seconds,
        )
