"""Administration endpoints (owner only)."""

from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from penguin.api.deps import require_caller
from penguin.config import get_settings
from penguin.ledger.database import get_db
from penguin.services import AdminService
from penguin.utils.locks import LedgerLock

router = APIRouter(prefix="/admin", tags=["admin"])


class AddressRequest(BaseModel):
    address: str


class TradeLimitRequest(BaseModel):
    """Both limits are replaced together. Amount is in base units."""

    max_amount: int
    max_count: int


class TaxRateRequest(BaseModel):
    bps: int


class TradeLimitResponse(BaseModel):
    daily_max_trade_amount: str
    daily_trade_limit: int


class AdminConfigResponse(BaseModel):
    owner: str
    liquidity_manager: Optional[str]
    tax_rate_bps: int
    daily_max_trade_amount: str
    daily_trade_limit: int


async def _mutate(
    caller: str, operation: str, action: Callable[[AdminService], Awaitable[None]]
) -> dict:
    settings = get_settings()
    async with LedgerLock(timeout=settings.lock_timeout_seconds, operation=operation):
        async with get_db() as session:
            await action(AdminService(session, caller))
    return {"success": True, "operation": operation}


@router.get("/config", response_model=AdminConfigResponse)
async def get_config() -> AdminConfigResponse:
    async with get_db() as session:
        admin = AdminService(session, caller="")
        return AdminConfigResponse(
            owner=await admin.owner(),
            liquidity_manager=await admin.liquidity_manager(),
            tax_rate_bps=await admin.tax_rate(),
            daily_max_trade_amount=str(await admin.get_daily_max_trade_amount()),
            daily_trade_limit=await admin.get_daily_trade_limit(),
        )


@router.get("/fee-exempt/{address}")
async def is_excluded_from_fee(address: str) -> dict:
    async with get_db() as session:
        excluded = await AdminService(session, caller="").is_excluded_from_fee(address)
        return {"address": address, "excluded": excluded}


@router.get("/trade-limit", response_model=TradeLimitResponse)
async def get_trade_limit() -> TradeLimitResponse:
    async with get_db() as session:
        admin = AdminService(session, caller="")
        return TradeLimitResponse(
            daily_max_trade_amount=str(await admin.get_daily_max_trade_amount()),
            daily_trade_limit=await admin.get_daily_trade_limit(),
        )


@router.post("/liquidity-manager")
async def set_liquidity_manager(
    request: AddressRequest, caller: str = Depends(require_caller)
) -> dict:
    return await _mutate(
        caller, "set_liquidity_manager", lambda admin: admin.set_liquidity_manager(request.address)
    )


@router.post("/trade-limit")
async def set_trade_limit(
    request: TradeLimitRequest, caller: str = Depends(require_caller)
) -> dict:
    return await _mutate(
        caller,
        "set_trade_limit",
        lambda admin: admin.set_trade_limit(request.max_amount, request.max_count),
    )


@router.post("/tax-rate")
async def set_tax_rate(request: TaxRateRequest, caller: str = Depends(require_caller)) -> dict:
    return await _mutate(caller, "set_tax_rate", lambda admin: admin.set_tax_rate(request.bps))


@router.post("/exclude-from-fee")
async def exclude_from_fee(request: AddressRequest, caller: str = Depends(require_caller)) -> dict:
    return await _mutate(
        caller, "exclude_from_fee", lambda admin: admin.exclude_from_fee(request.address)
    )


@router.post("/include-in-fee")
async def include_in_fee(request: AddressRequest, caller: str = Depends(require_caller)) -> dict:
    return await _mutate(
        caller, "include_in_fee", lambda admin: admin.include_in_fee(request.address)
    )


@router.post("/owner")
async def transfer_ownership(
    request: AddressRequest, caller: str = Depends(require_caller)
) -> dict:
    return await _mutate(
        caller, "transfer_ownership", lambda admin: admin.transfer_ownership(request.address)
    )
