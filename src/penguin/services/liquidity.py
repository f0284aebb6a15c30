"""Liquidity manager.

Collects the tax routed by transfers and periodically turns part of it into
pool liquidity: half of the chunk is swapped for the paired asset, the other
half is supplied together with the swap proceeds. This runs on its own
schedule, never inside a transfer.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from penguin.config import get_settings
from penguin.ledger.database import get_db
from penguin.ledger.models import LiquidityEvent
from penguin.ledger.repository import LedgerRepository
from penguin.policy import BPS_DENOMINATOR
from penguin.routing.base import AMMRouter
from penguin.services.transfer import Clock, TransferService, check_address
from penguin.utils.locks import LedgerLock

logger = logging.getLogger(__name__)


class LiquidityManager:
    """Swap-and-liquify driver for the tax collected by the liquidity manager."""

    def __init__(
        self,
        router: AMMRouter,
        token: str,
        pair_asset: str,
        address: Optional[str] = None,
        threshold: int = 0,
        fraction_bps: int = BPS_DENOMINATOR,
        clock: Optional[Clock] = None,
    ):
        """Initialize the manager.

        Args:
            router: AMM router holding the token/pair pool
            token: Symbol of the managed token
            pair_asset: Symbol of the asset the pool pairs it with
            address: Ledger account to drain. None follows the liquidity
                manager currently configured on the token
            threshold: Minimum balance (base units) before a run does anything
            fraction_bps: Share of the balance converted per run
            clock: Time source handed to the transfer service
        """
        if not 0 < fraction_bps <= BPS_DENOMINATOR:
            raise ValueError(f"fraction_bps must be in (0, {BPS_DENOMINATOR}], got {fraction_bps}")

        self.router = router
        self.token = token.upper()
        self.pair_asset = pair_asset.upper()
        self.address = check_address(address) if address is not None else None
        self.threshold = threshold
        self.fraction_bps = fraction_bps
        self.clock = clock
        self._stopped = asyncio.Event()

    async def swap_and_liquify(self, session: AsyncSession) -> Optional[LiquidityEvent]:
        """Convert a share of the collected tax into pool liquidity.

        Returns the recorded event, or None when there is nothing to do: no
        manager configured, a manager that is not fee-exempt, or a balance
        below the threshold. Router errors propagate; the session scope then
        rolls back the ledger move made in the same run.
        """
        repo = LedgerRepository(session)
        address = self.address or (await repo.get_config()).liquidity_manager
        if address is None:
            logger.debug("Skipping liquify: no liquidity manager configured")
            return None

        manager = await repo.get_account(address)
        if not manager.is_fee_exempt:
            # The pool must receive exactly what the router is told it received.
            logger.warning(f"Skipping liquify: manager {address} is not fee-exempt")
            return None

        balance = manager.balance
        if balance == 0 or balance < self.threshold:
            logger.debug(
                f"Skipping liquify: balance {balance} below threshold {self.threshold}"
            )
            return None

        amount = balance * self.fraction_bps // BPS_DENOMINATOR
        if amount < 2:
            logger.debug(f"Skipping liquify: {amount} {self.token} too small to split")
            return None

        # Tokens leave the manager for the pool before the router is called.
        result = await TransferService(session, clock=self.clock).transfer(
            address, self.router.pool_address, amount
        )
        half = result.net_amount // 2
        other_half = result.net_amount - half

        pair_received = await self.router.swap_tokens_for_pair(half)
        liquidity = await self.router.add_liquidity(other_half, pair_received)

        event = await repo.record_liquidity_event(
            manager=address,
            router=self.router.name,
            pair_asset=self.pair_asset,
            tokens_swapped=half,
            pair_received=pair_received,
            tokens_added=other_half,
            liquidity_minted=liquidity,
        )

        logger.info(
            f"Liquify via {self.router.name}: swapped {half} {self.token} for "
            f"{pair_received} {self.pair_asset}, added {other_half} {self.token} -> "
            f"{liquidity} LP"
        )
        return event

    async def run_once(self) -> Optional[LiquidityEvent]:
        """One serialized run in its own session."""
        settings = get_settings()
        async with LedgerLock(timeout=settings.lock_timeout_seconds, operation="liquify"):
            async with get_db() as session:
                return await self.swap_and_liquify(session)

    async def run(self, interval: int) -> None:
        """Run until ``stop()`` is called, sleeping ``interval`` seconds between runs."""
        target = self.address or "the configured manager"
        logger.info(f"Liquidity manager started for {target} (every {interval}s)")

        while not self._stopped.is_set():
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Liquify run failed: {e}")

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Liquidity manager stopped")

    def stop(self) -> None:
        self._stopped.set()
