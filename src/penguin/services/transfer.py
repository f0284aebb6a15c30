"""Transfer orchestration.

A transfer is evaluated completely before anything is written: the limit
check, the tax quote and every balance posting are validated against one
configuration snapshot. Only then are the sender debited, the receiver and
the liquidity manager credited and the sender's trade window committed.
A rejected transfer therefore leaves balances and windows untouched.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from penguin.errors import InvalidAddress, InvalidAmount, TokenError
from penguin.ledger.models import Account
from penguin.ledger.repository import LedgerRepository
from penguin.policy import ConfigSnapshot, FeeQuote, TradeWindow, compute_tax, evaluate_trade

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in whole epoch seconds."""
    return int(time.time())


def check_address(address: Optional[str]) -> str:
    """Return a usable address or raise InvalidAddress."""
    if not address or not address.strip():
        raise InvalidAddress(address)
    return address.strip()


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a committed transfer."""

    sender: str
    receiver: str
    amount: int
    debited: int
    net_amount: int
    tax_amount: int
    liquidity_manager: Optional[str]
    config_version: int
    timestamp: int
    record_id: int

    @property
    def success(self) -> bool:
        return True


class TransferService:
    """Moves tokens between accounts under the fee and limit policy."""

    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None):
        self.session = session
        self.repo = LedgerRepository(session)
        self.clock = clock or system_clock

    async def transfer(self, sender: str, to: str, amount: int) -> TransferResult:
        """Transfer ``amount`` base units from ``sender`` to ``to``.

        Raises:
            InvalidAmount: amount is zero or negative
            InvalidAddress: sender or receiver is empty
            TradeAmountExceeded / TradeLimitExceeded: sender limits
            InsufficientBalance: sender cannot cover the debit
            Overflow: a credit would exceed the uint256 maximum
            NotDeployed: the token has not been deployed
        """
        sender = check_address(sender)
        to = check_address(to)
        if amount <= 0:
            raise InvalidAmount(amount)

        config = await self.repo.get_config()
        snapshot = ConfigSnapshot.from_config(config)
        now = self.clock()

        sender_account = await self.repo.get_account(sender)
        receiver_account = await self.repo.get_account(to)
        exempt = sender_account.is_fee_exempt or receiver_account.is_fee_exempt

        try:
            window = evaluate_trade(
                sender,
                TradeWindow(sender_account.window_start, sender_account.trade_count),
                amount,
                now,
                snapshot,
                exempt,
            )
            quote = compute_tax(
                sender_account.is_fee_exempt, receiver_account.is_fee_exempt, amount, snapshot
            )
            manager_account = None
            if quote.is_taxed:
                manager_account = await self.repo.get_account(snapshot.liquidity_manager)
            self._preflight(sender_account, receiver_account, manager_account, quote)
        except TokenError as e:
            logger.warning(f"Transfer rejected {sender} -> {to} ({amount}): {e}")
            raise

        await self.repo.debit(sender, quote.debit_amount)
        await self.repo.credit(to, quote.net_amount)
        if manager_account is not None:
            await self.repo.credit(manager_account.address, quote.tax_amount)

        if not exempt:
            sender_account.window_start = window.window_start
            sender_account.trade_count = window.trade_count

        record = await self.repo.record_transfer(
            sender=sender,
            receiver=to,
            amount=amount,
            debited=quote.debit_amount,
            net_amount=quote.net_amount,
            tax_amount=quote.tax_amount,
            liquidity_manager=snapshot.liquidity_manager if quote.is_taxed else None,
            config_version=snapshot.version,
            timestamp=now,
        )

        logger.info(
            f"Transfer {sender} -> {to}: amount={amount} debited={quote.debit_amount} "
            f"net={quote.net_amount} tax={quote.tax_amount} (config v{snapshot.version})"
        )

        return TransferResult(
            sender=sender,
            receiver=to,
            amount=amount,
            debited=quote.debit_amount,
            net_amount=quote.net_amount,
            tax_amount=quote.tax_amount,
            liquidity_manager=record.liquidity_manager,
            config_version=snapshot.version,
            timestamp=now,
            record_id=record.id,
        )

    def _preflight(
        self,
        sender: Account,
        receiver: Account,
        manager: Optional[Account],
        quote: FeeQuote,
    ) -> None:
        """Validate every posting against the balances it will see."""
        self.repo.check_debit(sender, quote.debit_amount)

        # Sender, receiver and manager may be the same account.
        balances = {sender.address: sender.balance - quote.debit_amount}
        credits = [(receiver, quote.net_amount)]
        if manager is not None:
            credits.append((manager, quote.tax_amount))

        for account, amount in credits:
            current = balances.get(account.address, account.balance)
            self.repo.check_credit(account, amount, balance=current)
            balances[account.address] = current + amount
