"""Abstract interface to the AMM router used by the liquidity manager.

The router and its pool are external: the ledger only sees the pool's
address as the account that ends up holding the tokens the manager supplies.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class RouterError(Exception):
    """Raised when the router cannot perform a swap or liquidity operation."""

    pass


class AMMRouter(ABC):
    """Abstract base class for automated-market-maker routers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Router name identifier."""
        pass

    @property
    @abstractmethod
    def pool_address(self) -> str:
        """Ledger address that receives tokens sent to the pool."""
        pass

    @abstractmethod
    async def swap_tokens_for_pair(self, amount_in: int) -> int:
        """
        Swap tokens for the paired asset.

        Args:
            amount_in: Token amount in base units

        Returns:
            Paired-asset amount received, in its base units
        """
        pass

    @abstractmethod
    async def add_liquidity(self, token_amount: int, pair_amount: int) -> int:
        """
        Supply both sides of the pool.

        Args:
            token_amount: Token amount in base units
            pair_amount: Paired-asset amount in base units

        Returns:
            Liquidity tokens minted
        """
        pass
