"""Token deployment and public read queries."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from penguin.config import Settings, get_settings
from penguin.ledger.models import TokenConfig
from penguin.ledger.repository import LedgerRepository
from penguin.policy import FeeMode, TradeWindow
from penguin.services.transfer import check_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountInfo:
    address: str
    balance: int
    is_fee_exempt: bool
    window: TradeWindow


class TokenService:
    """Deploys the token and answers read-only questions about it."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = LedgerRepository(session)

    async def deploy(
        self, settings: Optional[Settings] = None, owner: Optional[str] = None
    ) -> TokenConfig:
        """Create the token from settings, minting the full supply to the owner.

        Raises:
            AlreadyDeployed: the token already exists
        """
        settings = settings or get_settings()
        owner = check_address(owner or settings.owner_address)

        config = await self.repo.deploy(
            owner=owner,
            total_supply=settings.total_supply_units,
            name=settings.token_name,
            symbol=settings.token_symbol,
            decimals=settings.token_decimals,
            tax_rate_bps=settings.tax_rate_bps,
            fee_mode=FeeMode(settings.fee_mode).value,
            daily_max_trade_amount=settings.daily_max_trade_amount_units,
            daily_trade_limit_count=settings.daily_trade_limit_count,
            trade_window_seconds=settings.trade_window_seconds,
        )

        if settings.liquidity_manager_address:
            manager = check_address(settings.liquidity_manager_address)
            config.liquidity_manager = manager
            account = await self.repo.get_or_create_account(manager)
            account.is_fee_exempt = True
            await self.session.flush()
            logger.info(f"Liquidity manager set at deployment: {manager}")

        return config

    async def is_deployed(self) -> bool:
        return await self.repo.find_config() is not None

    async def token_info(self) -> TokenConfig:
        return await self.repo.get_config()

    async def balance_of(self, address: str) -> int:
        return await self.repo.balance_of(address)

    async def total_supply(self) -> int:
        return await self.repo.total_supply()

    async def account_info(self, address: str) -> AccountInfo:
        account = await self.repo.get_account(address)
        return AccountInfo(
            address=account.address,
            balance=account.balance,
            is_fee_exempt=account.is_fee_exempt,
            window=TradeWindow(account.window_start, account.trade_count),
        )
