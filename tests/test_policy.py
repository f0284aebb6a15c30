"""Tests for the fee and trade limit policies."""

import pytest

from penguin.errors import TradeAmountExceeded, TradeLimitExceeded
from penguin.policy import (
    ConfigSnapshot,
    FeeMode,
    TradeWindow,
    WindowState,
    compute_tax,
    evaluate_trade,
    tax_for,
)

DAY = 86400
NOW = 1_700_000_000


def snapshot(**overrides) -> ConfigSnapshot:
    values = {
        "version": 1,
        "owner": "0xowner",
        "liquidity_manager": "0xmanager",
        "tax_rate_bps": 500,
        "fee_mode": FeeMode.INCLUSIVE,
        "daily_max_trade_amount": 1_000,
        "daily_trade_limit_count": 3,
        "trade_window_seconds": DAY,
    }
    values.update(overrides)
    return ConfigSnapshot(**values)


class TestComputeTax:
    """Tests for tax computation."""

    def test_inclusive_tax(self):
        """Test the receiver gets the amount minus 5%."""
        quote = compute_tax(False, False, 100, snapshot())

        assert quote.tax_amount == 5
        assert quote.debit_amount == 100
        assert quote.net_amount == 95

    def test_surcharge_tax(self):
        """Test the sender pays the tax on top of the amount."""
        quote = compute_tax(False, False, 100, snapshot(fee_mode=FeeMode.SURCHARGE))

        assert quote.tax_amount == 5
        assert quote.debit_amount == 105
        assert quote.net_amount == 100

    def test_tax_rounds_down(self):
        """Test fractional tax is floored."""
        assert tax_for(19, 500) == 0
        assert tax_for(20, 500) == 1
        assert tax_for(39, 500) == 1
        assert tax_for(10**18 + 1, 333) == (10**18 + 1) * 333 // 10000

    def test_receiver_keeps_rounding_dust(self):
        """Test the floored tax leaves the remainder with the receiver."""
        quote = compute_tax(False, False, 39, snapshot())

        assert quote.tax_amount == 1
        assert quote.net_amount == 38
        # floor(39 * 9500 / 10000) would be 37
        assert quote.net_amount == 39 * 9500 // 10000 + 1

    @pytest.mark.parametrize(
        "sender_exempt, receiver_exempt",
        [(True, False), (False, True), (True, True)],
    )
    def test_exemption_of_either_party(self, sender_exempt, receiver_exempt):
        """Test exemption on either side removes the tax."""
        quote = compute_tax(sender_exempt, receiver_exempt, 1_000, snapshot(tax_rate_bps=10000))

        assert quote.tax_amount == 0
        assert quote.net_amount == 1_000
        assert quote.debit_amount == 1_000

    def test_no_manager_no_tax(self):
        """Test nothing is collected while no liquidity manager is configured."""
        quote = compute_tax(False, False, 1_000, snapshot(liquidity_manager=None))

        assert quote.tax_amount == 0
        assert not quote.is_taxed

    def test_full_rate(self):
        """Test a 100% rate sends everything to the manager."""
        quote = compute_tax(False, False, 1_000, snapshot(tax_rate_bps=10000))

        assert quote.tax_amount == 1_000
        assert quote.net_amount == 0

    @pytest.mark.parametrize("amount", [1, 7, 99, 12345, 10**24 + 17])
    @pytest.mark.parametrize("rate", [0, 1, 250, 500, 9999])
    def test_postings_conserve_value(self, amount, rate):
        """Test the debit always equals the sum of the credits."""
        for mode in FeeMode:
            quote = compute_tax(False, False, amount, snapshot(tax_rate_bps=rate, fee_mode=mode))
            assert quote.debit_amount == quote.net_amount + quote.tax_amount


class TestTradeWindow:
    """Tests for window state evaluation."""

    def test_new_window_is_fresh(self):
        assert TradeWindow().state(NOW, DAY) == WindowState.FRESH

    def test_window_active_until_expiry(self):
        window = TradeWindow(window_start=NOW, trade_count=2)

        assert window.state(NOW + DAY - 1, DAY) == WindowState.ACTIVE
        assert window.state(NOW + DAY, DAY) == WindowState.FRESH
        assert window.trades_used(NOW + DAY - 1, DAY) == 2
        assert window.trades_used(NOW + DAY, DAY) == 0
        assert window.resets_at(DAY) == NOW + DAY


class TestEvaluateTrade:
    """Tests for the trade limit state machine."""

    def test_first_trade_opens_window(self):
        """Test Fresh -> Active."""
        window = evaluate_trade("0xa", TradeWindow(), 10, NOW, snapshot(), exempt=False)

        assert window == TradeWindow(window_start=NOW, trade_count=1)

    def test_trades_within_window_increment(self):
        """Test Active -> Active keeps the window start."""
        window = TradeWindow(window_start=NOW, trade_count=1)
        window = evaluate_trade("0xa", window, 10, NOW + 60, snapshot(), exempt=False)

        assert window == TradeWindow(window_start=NOW, trade_count=2)

    def test_limit_exceeded(self):
        """Test the trade after the limit is rejected."""
        window = TradeWindow(window_start=NOW, trade_count=3)

        with pytest.raises(TradeLimitExceeded) as exc_info:
            evaluate_trade("0xa", window, 10, NOW + 60, snapshot(), exempt=False)

        assert exc_info.value.limit == 3
        assert exc_info.value.window_start == NOW

    def test_expired_window_reopens(self):
        """Test Active -> Fresh discards the stale count."""
        window = TradeWindow(window_start=NOW, trade_count=3)
        window = evaluate_trade("0xa", window, 10, NOW + DAY, snapshot(), exempt=False)

        assert window == TradeWindow(window_start=NOW + DAY, trade_count=1)

    def test_amount_cap(self):
        """Test amounts above the maximum are rejected in any window state."""
        with pytest.raises(TradeAmountExceeded):
            evaluate_trade("0xa", TradeWindow(), 1_001, NOW, snapshot(), exempt=False)

        with pytest.raises(TradeAmountExceeded):
            evaluate_trade(
                "0xa", TradeWindow(NOW, 1), 1_001, NOW + 1, snapshot(), exempt=False
            )

    def test_amount_at_cap_allowed(self):
        window = evaluate_trade("0xa", TradeWindow(), 1_000, NOW, snapshot(), exempt=False)
        assert window.trade_count == 1

    def test_exempt_bypasses_limits(self):
        """Test exempt transfers skip both caps and consume no quota."""
        window = TradeWindow(window_start=NOW, trade_count=3)
        result = evaluate_trade("0xa", window, 10**30, NOW + 1, snapshot(), exempt=True)

        assert result is window

    def test_lowered_limit_applies_to_open_window(self):
        """Test an account over a newly lowered limit waits for its window to end."""
        window = TradeWindow(window_start=NOW, trade_count=2)

        with pytest.raises(TradeLimitExceeded):
            evaluate_trade(
                "0xa", window, 10, NOW + 1, snapshot(daily_trade_limit_count=1), exempt=False
            )
