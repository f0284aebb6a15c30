"""Dry-run router simulating a constant-product pool in memory."""

import logging
from math import isqrt

from penguin.policy import BPS_DENOMINATOR
from penguin.routing.base import AMMRouter, RouterError

logger = logging.getLogger(__name__)

DEFAULT_POOL_ADDRESS = "0x00000000000000000000000000000000000000ff"


class DryRunRouter(AMMRouter):
    """
    Simulated x*y=k pool for development and tests.

    Swaps charge ``swap_fee_bps`` on the input like a Uniswap v2 pair.
    All arithmetic is integer and rounds down in the pool's favour.
    """

    def __init__(
        self,
        token_reserve: int = 0,
        pair_reserve: int = 0,
        swap_fee_bps: int = 30,
        pool_address: str = DEFAULT_POOL_ADDRESS,
    ):
        self.token_reserve = token_reserve
        self.pair_reserve = pair_reserve
        self.swap_fee_bps = swap_fee_bps
        self._pool_address = pool_address
        self.total_liquidity = isqrt(token_reserve * pair_reserve)

    @property
    def name(self) -> str:
        return "dry_run"

    @property
    def pool_address(self) -> str:
        return self._pool_address

    def quote_swap(self, amount_in: int) -> int:
        """Paired-asset output for ``amount_in`` tokens at current reserves."""
        if amount_in <= 0:
            raise RouterError(f"Swap amount must be positive, got {amount_in}")
        if self.token_reserve == 0 or self.pair_reserve == 0:
            raise RouterError("Pool has no liquidity")

        amount_in_with_fee = amount_in * (BPS_DENOMINATOR - self.swap_fee_bps)
        numerator = amount_in_with_fee * self.pair_reserve
        denominator = self.token_reserve * BPS_DENOMINATOR + amount_in_with_fee
        return numerator // denominator

    async def swap_tokens_for_pair(self, amount_in: int) -> int:
        amount_out = self.quote_swap(amount_in)
        if amount_out == 0:
            raise RouterError(f"Swap of {amount_in} yields nothing")

        self.token_reserve += amount_in
        self.pair_reserve -= amount_out
        logger.debug(f"Dry-run swap: {amount_in} tokens -> {amount_out} pair")
        return amount_out

    async def add_liquidity(self, token_amount: int, pair_amount: int) -> int:
        if token_amount <= 0 or pair_amount <= 0:
            raise RouterError(
                f"Liquidity amounts must be positive, got {token_amount}/{pair_amount}"
            )

        if self.total_liquidity == 0:
            minted = isqrt(token_amount * pair_amount)
        else:
            minted = min(
                token_amount * self.total_liquidity // self.token_reserve,
                pair_amount * self.total_liquidity // self.pair_reserve,
            )
        if minted == 0:
            raise RouterError("Insufficient liquidity minted")

        self.token_reserve += token_amount
        self.pair_reserve += pair_amount
        self.total_liquidity += minted
        logger.debug(f"Dry-run liquidity: {token_amount} tokens + {pair_amount} pair -> {minted} LP")
        return minted
