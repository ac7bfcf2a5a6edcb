# src/pm_order/infrastructure/persistence.py
"""OrderRepository: raw SQL persistence implementation."""
from dataclasses import replace
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (user_id, condition_id, token_id, type, side,
        price, shares, maker_amount, status, maker_address, taker_address,
        salt, expiration, fee_rate_bps, referrer, affiliate, affiliate_percentage,
        affiliate_user_id, trade_fee_bps, affiliate_share_bps,
        affiliate_fee_amount, fork_fee_amount, exchange_order_id)
    VALUES (:user_id, :condition_id, :token_id, :type, :side,
        :price, :shares, :maker_amount, :status, :maker_address, :taker_address,
        :salt, :expiration, :fee_rate_bps, :referrer, :affiliate, :affiliate_percentage,
        :affiliate_user_id, :trade_fee_bps, :affiliate_share_bps,
        :affiliate_fee_amount, :fork_fee_amount, :exchange_order_id)
    RETURNING id, created_at, updated_at
""")

_SELECT_COLUMNS = """
    id, user_id, condition_id, token_id, type, side, price, shares, maker_amount,
    status, maker_address, taker_address, salt, expiration, fee_rate_bps,
    referrer, affiliate, affiliate_percentage, affiliate_user_id,
    trade_fee_bps, affiliate_share_bps, affiliate_fee_amount, fork_fee_amount,
    exchange_order_id, created_at, updated_at
"""

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE user_id = :user_id
      AND (CAST(:condition_id AS TEXT) IS NULL OR condition_id = :condition_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL
           OR (created_at, id) < (SELECT created_at, id FROM orders WHERE id = :cursor_id))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        user_id=row.user_id,
        condition_id=row.condition_id,
        token_id=row.token_id,
        type=row.type,
        side=row.side,
        price=row.price,
        shares=row.shares,
        maker_amount=row.maker_amount,
        status=row.status,
        maker_address=row.maker_address,
        taker_address=row.taker_address,
        salt=int(row.salt) if row.salt is not None else None,
        expiration=row.expiration,
        fee_rate_bps=row.fee_rate_bps,
        referrer=row.referrer,
        affiliate=row.affiliate,
        affiliate_percentage=row.affiliate_percentage,
        affiliate_user_id=row.affiliate_user_id,
        trade_fee_bps=row.trade_fee_bps,
        affiliate_share_bps=row.affiliate_share_bps,
        affiliate_fee_amount=row.affiliate_fee_amount,
        fork_fee_amount=row.fork_fee_amount,
        exchange_order_id=row.exchange_order_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _order_params(order: Order) -> dict[str, Any]:
    return {
        "user_id": order.user_id,
        "condition_id": order.condition_id,
        "token_id": order.token_id,
        "type": order.type,
        "side": order.side,
        "price": order.price,
        "shares": order.shares,
        "maker_amount": order.maker_amount,
        "status": order.status,
        "maker_address": order.maker_address,
        "taker_address": order.taker_address,
        "salt": order.salt,
        "expiration": order.expiration,
        "fee_rate_bps": order.fee_rate_bps,
        "referrer": order.referrer,
        "affiliate": order.affiliate,
        "affiliate_percentage": order.affiliate_percentage,
        "affiliate_user_id": order.affiliate_user_id,
        "trade_fee_bps": order.trade_fee_bps,
        "affiliate_share_bps": order.affiliate_share_bps,
        "affiliate_fee_amount": order.affiliate_fee_amount,
        "fork_fee_amount": order.fork_fee_amount,
        "exchange_order_id": order.exchange_order_id,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> Order:
        """Insert the order; id and timestamps are assigned by the database."""
        result = await db.execute(_INSERT_ORDER_SQL, _order_params(order))
        row = result.fetchone()
        return replace(order, id=row.id, created_at=row.created_at, updated_at=row.updated_at)

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_user(
        self,
        user_id: str,
        condition_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "user_id": user_id,
                "condition_id": condition_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_order(row) for row in rows]
