"""Fee & exemption policy.

Exemption of either party skips the tax, so marking the liquidity manager
exempt keeps the fee collection path itself untaxed. Tax is floored, so the
ledger never credits more than it debits.
"""

from dataclasses import dataclass

from penguin.policy.snapshot import BPS_DENOMINATOR, ConfigSnapshot, FeeMode


@dataclass(frozen=True)
class FeeQuote:
    """Ledger postings for one transfer."""

    amount: int  # principal requested by the caller
    tax_amount: int
    debit_amount: int  # taken from the sender
    net_amount: int  # given to the receiver

    @property
    def is_taxed(self) -> bool:
        return self.tax_amount > 0


def tax_for(amount: int, tax_rate_bps: int) -> int:
    """floor(amount * rate / 10000)."""
    return amount * tax_rate_bps // BPS_DENOMINATOR


def compute_tax(
    sender_exempt: bool,
    receiver_exempt: bool,
    amount: int,
    snapshot: ConfigSnapshot,
) -> FeeQuote:
    """Work out what the sender pays, the receiver gets and the manager collects."""
    if sender_exempt or receiver_exempt or snapshot.liquidity_manager is None:
        tax = 0
    else:
        tax = tax_for(amount, snapshot.tax_rate_bps)

    if snapshot.fee_mode == FeeMode.SURCHARGE:
        return FeeQuote(amount=amount, tax_amount=tax, debit_amount=amount + tax, net_amount=amount)

    # Floored tax: rounding dust stays with the receiver
    return FeeQuote(amount=amount, tax_amount=tax, debit_amount=amount, net_amount=amount - tax)
