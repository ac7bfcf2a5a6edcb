"""SQLAlchemy ORM models for the market-data tables.

Used for type reference only: persistence.py and snapshot_writer.py use
raw text() SQL. Alembic migrations (003/004) are the authoritative DDL source.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Numeric, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.pm_common.database import Base


class EventORM(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ConditionORM(Base):
    __tablename__ = "conditions"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    status: Mapped[str | None] = mapped_column(Text)
    outcome_slot_count: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    snapshot_ts: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class MarketORM(Base):
    __tablename__ = "markets"

    condition_id: Mapped[str] = mapped_column(Text, primary_key=True)
    event_id: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_volume_24h: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    total_volume: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    last_snapshot_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class OutcomeORM(Base):
    __tablename__ = "outcomes"

    token_id: Mapped[str] = mapped_column(Text, primary_key=True)
    condition_id: Mapped[str] = mapped_column(Text, nullable=False)
    outcome_index: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    outcome_text: Mapped[str] = mapped_column(Text, nullable=False)
    best_bid_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    best_bid_size: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    best_ask_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    best_ask_size: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    open_interest: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    last_trade_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 6))
    last_trade_ts: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    volume_24h: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    total_volume: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    snapshot_ts: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class OutcomeRecentTradeORM(Base):
    __tablename__ = "outcome_recent_trades"

    trade_id: Mapped[str] = mapped_column(Text, primary_key=True)
    token_id: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    size: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)
    side: Mapped[str] = mapped_column(Text, nullable=False)
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    buyer_order_id: Mapped[str | None] = mapped_column(Text)
    seller_order_id: Mapped[str | None] = mapped_column(Text)
    inserted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
