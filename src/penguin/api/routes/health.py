"""Health check endpoints."""

from fastapi import APIRouter

from penguin import __version__
from penguin.config import get_settings
from penguin.ledger.database import get_db
from penguin.ledger.repository import LedgerRepository

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "penguin"}


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with configuration and supply conservation."""
    settings = get_settings()

    async with get_db() as session:
        repo = LedgerRepository(session)
        config = await repo.find_config()
        ledger = {"deployed": config is not None}
        if config is not None:
            balances = await repo.sum_balances()
            ledger.update(
                {
                    "total_supply": str(config.total_supply),
                    "sum_of_balances": str(balances),
                    "conserved": balances == config.total_supply,
                    "config_version": config.version,
                }
            )

    return {
        "status": "healthy" if ledger.get("conserved", True) else "degraded",
        "service": "penguin",
        "version": __version__,
        "ledger": ledger,
        "config": settings.get_safe_dict(),
    }
