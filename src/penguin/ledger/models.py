"""SQLAlchemy models for the ledger."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

MAX_UINT256 = 2**256 - 1


class UInt256(TypeDecorator):
    """Unsigned 256-bit integer stored as its decimal string.

    SQLite has no exact integer type wider than 64 bits and NUMERIC columns
    fall back to REAL, so base-unit amounts are kept as text.
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value: Optional[int], dialect) -> Optional[str]:
        if value is None:
            return None
        value = int(value)
        if value < 0 or value > MAX_UINT256:
            raise ValueError(f"Value out of uint256 range: {value}")
        return str(value)

    def process_result_value(self, value: Optional[str], dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Account(Base):
    """Token holder, created on first mutation that touches it."""

    __tablename__ = "accounts"

    address: Mapped[str] = mapped_column(String(255), primary_key=True)
    balance: Mapped[int] = mapped_column(UInt256, default=0, nullable=False)
    is_fee_exempt: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Rolling trade window, tracked for the account as sender only
    window_start: Mapped[Optional[int]] = mapped_column(nullable=True)  # epoch seconds
    trade_count: Mapped[int] = mapped_column(default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @classmethod
    def blank(cls, address: str) -> "Account":
        """Zero-value account for an address never seen before."""
        return cls(
            address=address,
            balance=0,
            is_fee_exempt=False,
            window_start=None,
            trade_count=0,
        )


class TokenConfig(Base):
    """Process-wide token configuration. Exactly one row (id=1)."""

    __tablename__ = "token_config"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    decimals: Mapped[int] = mapped_column(nullable=False)
    total_supply: Mapped[int] = mapped_column(UInt256, nullable=False)

    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    liquidity_manager: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    tax_rate_bps: Mapped[int] = mapped_column(nullable=False)
    fee_mode: Mapped[str] = mapped_column(String(20), nullable=False, default="inclusive")
    daily_max_trade_amount: Mapped[int] = mapped_column(UInt256, nullable=False)
    daily_trade_limit_count: Mapped[int] = mapped_column(nullable=False)
    trade_window_seconds: Mapped[int] = mapped_column(nullable=False)

    # Bumped by every administration mutation
    version: Mapped[int] = mapped_column(default=1, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class TransferRecord(Base):
    """Audit record of a committed transfer."""

    __tablename__ = "transfers"
    __table_args__ = (Index("ix_transfers_sender_created", "sender", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(UInt256, nullable=False)  # principal
    debited: Mapped[int] = mapped_column(UInt256, nullable=False)  # taken from sender
    net_amount: Mapped[int] = mapped_column(UInt256, nullable=False)  # given to receiver
    tax_amount: Mapped[int] = mapped_column(UInt256, nullable=False)
    liquidity_manager: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    config_version: Mapped[int] = mapped_column(nullable=False)
    timestamp: Mapped[int] = mapped_column(nullable=False)  # clock value used for limits
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class LiquidityEvent(Base):
    """Record of one swap-and-liquify run by the liquidity manager."""

    __tablename__ = "liquidity_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    manager: Mapped[str] = mapped_column(String(255), nullable=False)
    router: Mapped[str] = mapped_column(String(50), nullable=False)
    pair_asset: Mapped[str] = mapped_column(String(20), nullable=False)
    tokens_swapped: Mapped[int] = mapped_column(UInt256, nullable=False)
    pair_received: Mapped[int] = mapped_column(UInt256, nullable=False)
    tokens_added: Mapped[int] = mapped_column(UInt256, nullable=False)
    liquidity_minted: Mapped[int] = mapped_column(UInt256, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
