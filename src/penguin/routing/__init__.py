"""AMM router boundary for the liquidity manager."""

from penguin.routing.base import AMMRouter, RouterError
from penguin.routing.dry_run import DryRunRouter

__all__ = ["AMMRouter", "DryRunRouter", "RouterError"]
