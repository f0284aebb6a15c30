"""Repository for ledger operations.

``debit`` and ``credit`` are the only balance mutators. Neither knows about
tax or limits; each raises before touching the account, so the invariant
"sum of balances == total supply" only depends on callers pairing them.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from penguin.errors import AlreadyDeployed, InsufficientBalance, NotDeployed, Overflow
from penguin.ledger.models import (
    MAX_UINT256,
    Account,
    LiquidityEvent,
    TokenConfig,
    TransferRecord,
)

logger = logging.getLogger(__name__)

CONFIG_ROW_ID = 1
PENDING_ACCOUNTS_KEY = "penguin.pending_accounts"


class LedgerRepository:
    """Repository for all ledger-related database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        # Zero-value accounts handed out for unseen addresses. Kept on the
        # session so every repository sharing it returns the same object.
        self._pending: dict[str, Account] = session.info.setdefault(PENDING_ACCOUNTS_KEY, {})

    # Account operations
    async def get_account(self, address: str) -> Account:
        """Get an account, or a zero-value one that is not yet persisted."""
        if address in self._pending:
            return self._pending[address]

        account = await self.session.get(Account, address)
        if account is None:
            account = Account.blank(address)
            self._pending[address] = account
        return account

    async def get_or_create_account(self, address: str) -> Account:
        """Get an account and make sure it is part of the session."""
        account = await self.get_account(address)
        await self._persist(account)
        return account

    async def _persist(self, account: Account) -> None:
        if self._pending.pop(account.address, None) is not None:
            self.session.add(account)
            await self.session.flush()

    async def list_accounts(self, limit: int = 100, offset: int = 0) -> list[Account]:
        """Get persisted accounts ordered by address."""
        stmt = select(Account).order_by(Account.address).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # Balance operations
    async def balance_of(self, address: str) -> int:
        """Get the balance of an address (0 for unseen addresses)."""
        account = await self.get_account(address)
        return account.balance

    async def total_supply(self) -> int:
        """Get the fixed total supply."""
        config = await self.get_config()
        return config.total_supply

    async def sum_balances(self) -> int:
        """Sum of every account balance, computed exactly in Python."""
        result = await self.session.execute(select(Account.balance))
        return sum(result.scalars().all())

    @staticmethod
    def check_debit(account: Account, amount: int) -> None:
        """Raise InsufficientBalance if the account cannot cover amount."""
        if account.balance < amount:
            raise InsufficientBalance(account.address, account.balance, amount)

    @staticmethod
    def check_credit(account: Account, amount: int, balance: Optional[int] = None) -> None:
        """Raise Overflow if crediting amount would pass the uint256 maximum."""
        current = account.balance if balance is None else balance
        if current + amount > MAX_UINT256:
            raise Overflow(account.address, current, amount)

    async def debit(self, address: str, amount: int) -> Account:
        """Subtract amount from a balance. Raises InsufficientBalance."""
        account = await self.get_account(address)
        self.check_debit(account, amount)
        await self._persist(account)
        account.balance -= amount
        return account

    async def credit(self, address: str, amount: int) -> Account:
        """Add amount to a balance. Raises Overflow."""
        account = await self.get_account(address)
        self.check_credit(account, amount)
        await self._persist(account)
        account.balance += amount
        return account

    # Token configuration
    async def find_config(self) -> Optional[TokenConfig]:
        """Get the configuration row, or None before deployment."""
        return await self.session.get(TokenConfig, CONFIG_ROW_ID)

    async def get_config(self) -> TokenConfig:
        """Get the configuration row. Raises NotDeployed."""
        config = await self.find_config()
        if config is None:
            raise NotDeployed()
        return config

    async def deploy(
        self,
        owner: str,
        total_supply: int,
        name: str,
        symbol: str,
        decimals: int,
        tax_rate_bps: int,
        fee_mode: str,
        daily_max_trade_amount: int,
        daily_trade_limit_count: int,
        trade_window_seconds: int,
    ) -> TokenConfig:
        """Create the configuration and mint the whole supply to the owner."""
        if await self.find_config() is not None:
            raise AlreadyDeployed()

        config = TokenConfig(
            id=CONFIG_ROW_ID,
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=total_supply,
            owner=owner,
            liquidity_manager=None,
            tax_rate_bps=tax_rate_bps,
            fee_mode=fee_mode,
            daily_max_trade_amount=daily_max_trade_amount,
            daily_trade_limit_count=daily_trade_limit_count,
            trade_window_seconds=trade_window_seconds,
            version=1,
        )
        self.session.add(config)
        await self.credit(owner, total_supply)
        await self.session.flush()

        logger.info(f"Deployed {symbol}: minted {total_supply} to owner {owner}")
        return config

    # Audit records
    async def record_transfer(
        self,
        sender: str,
        receiver: str,
        amount: int,
        debited: int,
        net_amount: int,
        tax_amount: int,
        liquidity_manager: Optional[str],
        config_version: int,
        timestamp: int,
    ) -> TransferRecord:
        """Append an audit record for a committed transfer."""
        record = TransferRecord(
            sender=sender,
            receiver=receiver,
            amount=amount,
            debited=debited,
            net_amount=net_amount,
            tax_amount=tax_amount,
            liquidity_manager=liquidity_manager,
            config_version=config_version,
            timestamp=timestamp,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_transfers(
        self, address: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> list[TransferRecord]:
        """Get transfer history, optionally for one sender or receiver."""
        stmt = select(TransferRecord)
        if address:
            stmt = stmt.where(
                (TransferRecord.sender == address) | (TransferRecord.receiver == address)
            )
        stmt = stmt.order_by(TransferRecord.id.desc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_transfer_count(self) -> int:
        """Get total number of committed transfers."""
        stmt = select(func.count(TransferRecord.id))
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def record_liquidity_event(
        self,
        manager: str,
        router: str,
        pair_asset: str,
        tokens_swapped: int,
        pair_received: int,
        tokens_added: int,
        liquidity_minted: int,
    ) -> LiquidityEvent:
        """Record one swap-and-liquify run."""
        event = LiquidityEvent(
            manager=manager,
            router=router,
            pair_asset=pair_asset.upper(),
            tokens_swapped=tokens_swapped,
            pair_received=pair_received,
            tokens_added=tokens_added,
            liquidity_minted=liquidity_minted,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def get_liquidity_events(self, limit: int = 20) -> list[LiquidityEvent]:
        """Get the most recent liquidity events."""
        stmt = select(LiquidityEvent).order_by(LiquidityEvent.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
