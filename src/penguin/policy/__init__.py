"""Transfer policy: tax computation and trade limits."""

from penguin.policy.fees import FeeQuote, compute_tax, tax_for
from penguin.policy.limits import TradeWindow, WindowState, evaluate_trade
from penguin.policy.snapshot import BPS_DENOMINATOR, ConfigSnapshot, FeeMode

__all__ = [
    "BPS_DENOMINATOR",
    "ConfigSnapshot",
    "FeeMode",
    "FeeQuote",
    "TradeWindow",
    "WindowState",
    "compute_tax",
    "evaluate_trade",
    "tax_for",
]
