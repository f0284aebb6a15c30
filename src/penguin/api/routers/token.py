"""Public token endpoints: reads and transfers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from penguin.api.deps import require_caller
from penguin.config import get_settings
from penguin.ledger.database import get_db
from penguin.services import TokenService, TransferService
from penguin.utils.locks import LedgerLock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["token"])


class TokenInfo(BaseModel):
    """Token metadata and current configuration."""

    name: str
    symbol: str
    decimals: int
    total_supply: str
    owner: str
    liquidity_manager: Optional[str]
    tax_rate_bps: int
    fee_mode: str
    config_version: int


class TradeWindowInfo(BaseModel):
    window_start: Optional[int]
    trade_count: int


class AccountResponse(BaseModel):
    address: str
    balance: str
    is_fee_exempt: bool
    trade_window: TradeWindowInfo


class TransferRequest(BaseModel):
    """Transfer from the caller. Amount is in base units."""

    to: str
    amount: int


class TransferResponse(BaseModel):
    success: bool
    sender: str
    to: str
    amount: str
    debited: str
    net_amount: str
    tax_amount: str
    config_version: int
    record_id: int


@router.get("/token", response_model=TokenInfo)
async def get_token() -> TokenInfo:
    async with get_db() as session:
        config = await TokenService(session).token_info()
        return TokenInfo(
            name=config.name,
            symbol=config.symbol,
            decimals=config.decimals,
            total_supply=str(config.total_supply),
            owner=config.owner,
            liquidity_manager=config.liquidity_manager,
            tax_rate_bps=config.tax_rate_bps,
            fee_mode=config.fee_mode,
            config_version=config.version,
        )


@router.get("/accounts/{address}", response_model=AccountResponse)
async def get_account(address: str) -> AccountResponse:
    async with get_db() as session:
        info = await TokenService(session).account_info(address)
        return AccountResponse(
            address=info.address,
            balance=str(info.balance),
            is_fee_exempt=info.is_fee_exempt,
            trade_window=TradeWindowInfo(
                window_start=info.window.window_start,
                trade_count=info.window.trade_count,
            ),
        )


@router.get("/accounts/{address}/balance")
async def get_balance(address: str) -> dict:
    async with get_db() as session:
        balance = await TokenService(session).balance_of(address)
        return {"address": address, "balance": str(balance)}


@router.post("/transfer", response_model=TransferResponse)
async def transfer(
    request: TransferRequest,
    caller: str = Depends(require_caller),
) -> TransferResponse:
    """Transfer tokens from the caller to ``request.to``."""
    settings = get_settings()

    async with LedgerLock(timeout=settings.lock_timeout_seconds, operation="transfer"):
        async with get_db() as session:
            result = await TransferService(session).transfer(caller, request.to, request.amount)

    return TransferResponse(
        success=result.success,
        sender=result.sender,
        to=result.receiver,
        amount=str(result.amount),
        debited=str(result.debited),
        net_amount=str(result.net_amount),
        tax_amount=str(result.tax_amount),
        config_version=result.config_version,
        record_id=result.record_id,
    )
