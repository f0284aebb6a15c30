"""Administration surface.

Mutators require the caller to be the current owner. Each one changes the
configuration row in place and bumps its version; none of them touches
balances or resets trade windows.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from penguin.errors import InvalidLimit, InvalidRate, Unauthorized
from penguin.ledger.models import TokenConfig
from penguin.ledger.repository import LedgerRepository
from penguin.policy import BPS_DENOMINATOR, TradeWindow
from penguin.services.transfer import check_address

logger = logging.getLogger(__name__)


class AdminService:
    """Owner-gated configuration changes plus the matching public reads."""

    def __init__(self, session: AsyncSession, caller: str):
        self.session = session
        self.caller = caller
        self.repo = LedgerRepository(session)

    async def _require_owner(self, operation: str) -> TokenConfig:
        config = await self.repo.get_config()
        if self.caller != config.owner:
            logger.warning(f"Unauthorized {operation} attempt by {self.caller}")
            raise Unauthorized(self.caller, operation)
        return config

    async def _bump(self, config: TokenConfig, operation: str) -> None:
        config.version += 1
        await self.session.flush()
        logger.info(f"{operation} by {self.caller}: config now v{config.version}")

    # Mutators
    async def set_liquidity_manager(self, address: str) -> None:
        """Route future tax to ``address`` and exempt it from fees."""
        config = await self._require_owner("set_liquidity_manager")
        address = check_address(address)

        previous = config.liquidity_manager
        config.liquidity_manager = address
        account = await self.repo.get_or_create_account(address)
        account.is_fee_exempt = True

        await self._bump(config, f"set_liquidity_manager {previous} -> {address}")

    async def set_trade_limit(self, max_amount: int, max_count: int) -> None:
        """Replace both limits together. Open windows keep their counts."""
        config = await self._require_owner("set_trade_limit")
        if max_amount <= 0 or max_count <= 0:
            raise InvalidLimit(max_amount, max_count)

        config.daily_max_trade_amount = max_amount
        config.daily_trade_limit_count = max_count

        await self._bump(config, f"set_trade_limit amount={max_amount} count={max_count}")

    async def set_tax_rate(self, bps: int) -> None:
        config = await self._require_owner("set_tax_rate")
        if bps < 0 or bps > BPS_DENOMINATOR:
            raise InvalidRate(bps)

        config.tax_rate_bps = bps
        await self._bump(config, f"set_tax_rate {bps} bps")

    async def exclude_from_fee(self, address: str) -> None:
        await self._set_fee_exempt(address, True, "exclude_from_fee")

    async def include_in_fee(self, address: str) -> None:
        await self._set_fee_exempt(address, False, "include_in_fee")

    async def _set_fee_exempt(self, address: str, exempt: bool, operation: str) -> None:
        config = await self._require_owner(operation)
        address = check_address(address)

        account = await self.repo.get_or_create_account(address)
        account.is_fee_exempt = exempt
        await self._bump(config, f"{operation} {address}")

    async def transfer_ownership(self, new_owner: str) -> None:
        """Hand the administrator role to ``new_owner``."""
        config = await self._require_owner("transfer_ownership")
        new_owner = check_address(new_owner)

        previous = config.owner
        config.owner = new_owner
        await self._bump(config, f"transfer_ownership {previous} -> {new_owner}")

    # Unrestricted reads
    async def is_excluded_from_fee(self, address: str) -> bool:
        account = await self.repo.get_account(address)
        return account.is_fee_exempt

    async def get_daily_max_trade_amount(self) -> int:
        return (await self.repo.get_config()).daily_max_trade_amount

    async def get_daily_trade_limit(self) -> int:
        return (await self.repo.get_config()).daily_trade_limit_count

    async def tax_rate(self) -> int:
        """Current tax rate in basis points."""
        return (await self.repo.get_config()).tax_rate_bps

    async def owner(self) -> str:
        return (await self.repo.get_config()).owner

    async def liquidity_manager(self) -> str | None:
        return (await self.repo.get_config()).liquidity_manager

    async def get_trade_window(self, address: str) -> TradeWindow:
        account = await self.repo.get_account(address)
        return TradeWindow(account.window_start, account.trade_count)
