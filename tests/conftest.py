"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["LIQUIDITY_MANAGER_ADDRESS"] = ""

from penguin.config import Settings
from penguin.ledger.models import Base
from penguin.ledger.repository import LedgerRepository
from penguin.services import AdminService, TokenService, TransferService

UNIT = 10**18

OWNER = "0xowner"
USER1 = "0xuser1"
USER2 = "0xuser2"
USER3 = "0xuser3"
MANAGER = "0xliquiditymanager"

START_TIME = 1_700_000_000
DAY = 86400


class FakeClock:
    """Deterministic clock for trade window tests."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def make_settings(**overrides) -> Settings:
    """Settings that ignore the environment and any .env file."""
    values = {
        "owner_address": OWNER,
        "total_supply_tokens": 1_000_000_000,
        "tax_rate_bps": 500,
        "fee_mode": "inclusive",
        "daily_max_trade_amount_tokens": 1_000_000,
        "daily_trade_limit_count": 10,
        "liquidity_manager_address": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def db_engine():
    """Create in-memory database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def ledger_repo(db_session: AsyncSession) -> LedgerRepository:
    """Create ledger repository for testing."""
    return LedgerRepository(db_session)


@pytest_asyncio.fixture
async def token(db_session: AsyncSession, settings: Settings) -> TokenService:
    """Deployed token with the whole supply on the owner."""
    service = TokenService(db_session)
    await service.deploy(settings)
    await db_session.commit()
    return service


@pytest.fixture
def transfers(db_session: AsyncSession, clock: FakeClock) -> TransferService:
    return TransferService(db_session, clock=clock)


@pytest.fixture
def admin(db_session: AsyncSession) -> AdminService:
    return AdminService(db_session, caller=OWNER)


@pytest_asyncio.fixture
async def funded(token: TokenService, admin: AdminService, transfers: TransferService, db_session):
    """Token set up like a fresh deployment.

    Liquidity manager configured, limits of 1,000,000 tokens / 10 trades,
    and 10,000 tokens sent from the owner to each of USER1 and USER2.
    """
    await admin.set_liquidity_manager(MANAGER)
    await admin.set_trade_limit(1_000_000 * UNIT, 10)
    await transfers.transfer(OWNER, USER1, 10_000 * UNIT)
    await transfers.transfer(OWNER, USER2, 10_000 * UNIT)
    await db_session.commit()
    return token
