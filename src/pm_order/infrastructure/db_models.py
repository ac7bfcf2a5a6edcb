# src/pm_order/infrastructure/db_models.py
"""SQLAlchemy ORM model for the orders table (DDL reference only; queries use raw SQL)."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, SmallInteger, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from src.pm_common.database import Base


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(Text, primary_key=True, server_default=text("gen_random_uuid()::text"))
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    condition_id: Mapped[str] = mapped_column(Text, nullable=False)
    token_id: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    side: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    price: Mapped[int | None] = mapped_column(BigInteger)
    shares: Mapped[int | None] = mapped_column(BigInteger)
    maker_amount: Mapped[int | None] = mapped_column(BigInteger)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="open")
    maker_address: Mapped[str] = mapped_column(Text, nullable=False)
    taker_address: Mapped[str] = mapped_column(Text, nullable=False)
    salt: Mapped[Decimal | None] = mapped_column(Numeric(78, 0))
    expiration: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    fee_rate_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    referrer: Mapped[str] = mapped_column(Text, nullable=False)
    affiliate: Mapped[str | None] = mapped_column(Text)
    affiliate_percentage: Mapped[int | None] = mapped_column(Integer)
    affiliate_user_id: Mapped[str | None] = mapped_column(Text)
    trade_fee_bps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    affiliate_share_bps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    affiliate_fee_amount: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False, default=0)
    fork_fee_amount: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False, default=0)
    exchange_order_id: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
