"""Rolling trade window per sending account.

A window is FRESH when it was never opened or when ``now - window_start``
has reached the window length; otherwise it is ACTIVE. Expiry is never
written back: it is derived from the clock each time the window is read,
and the next transfer simply opens a new window.

``evaluate_trade`` is pure. It returns the window the caller should commit
once the rest of the transfer has succeeded, or raises.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from penguin.errors import TradeAmountExceeded, TradeLimitExceeded
from penguin.policy.snapshot import ConfigSnapshot


class WindowState(str, Enum):
    FRESH = "fresh"
    ACTIVE = "active"


@dataclass(frozen=True)
class TradeWindow:
    window_start: Optional[int] = None
    trade_count: int = 0

    def state(self, now: int, window_seconds: int) -> WindowState:
        if self.window_start is None or now - self.window_start >= window_seconds:
            return WindowState.FRESH
        return WindowState.ACTIVE

    def trades_used(self, now: int, window_seconds: int) -> int:
        """Trades counted against the window in force at ``now``."""
        if self.state(now, window_seconds) == WindowState.FRESH:
            return 0
        return self.trade_count

    def resets_at(self, window_seconds: int) -> Optional[int]:
        if self.window_start is None:
            return None
        return self.window_start + window_seconds


def evaluate_trade(
    address: str,
    window: TradeWindow,
    amount: int,
    now: int,
    snapshot: ConfigSnapshot,
    exempt: bool,
) -> TradeWindow:
    """Check a transfer against the sender's limits.

    Raises:
        TradeAmountExceeded: amount is above the per-transfer maximum
        TradeLimitExceeded: the sender has no transfers left in its window
    """
    if exempt:
        return window

    if amount > snapshot.daily_max_trade_amount:
        raise TradeAmountExceeded(amount, snapshot.daily_max_trade_amount)

    if window.state(now, snapshot.trade_window_seconds) == WindowState.FRESH:
        return TradeWindow(window_start=now, trade_count=1)

    if window.trade_count + 1 > snapshot.daily_trade_limit_count:
        raise TradeLimitExceeded(
            address, window.trade_count, snapshot.daily_trade_limit_count, window.window_start
        )

    return TradeWindow(window_start=window.window_start, trade_count=window.trade_count + 1)
