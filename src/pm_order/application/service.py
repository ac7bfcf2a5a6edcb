# src/pm_order/application/service.py
"""OrderSubmissionService: validate, price fees, submit, persist.

    Validating ─┬─ no user ──────────────→ UnauthenticatedError
                ├─ bad payload ──────────→ OrderValidationError (first issue)
                └─ Submitting
                     ├─ exchange refuses → OrderRejectedError (body verbatim)
                     └─ Submitted
                          ├─ insert fails → OrderPersistFailedError
                          └─ Persisted

The exchange call is never retried: a retry after an ambiguous failure could
submit the same order twice. A failed insert after acceptance leaves an
order on the exchange with no local row; it is logged at ERROR with the
exchange order id for manual reconciliation.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.pm_affiliate.application.service import FeeSettingsService, ReferralService
from src.pm_affiliate.domain.models import AffiliateReferral, FeeSettings
from src.pm_clearing.domain.fee import FeeSplit, compute_fee_split
from src.pm_common.datetime_utils import parse_timestamp
from src.pm_common.enums import OrderType
from src.pm_common.errors import (
    ExchangeError,
    OrderNotFoundError,
    OrderPersistFailedError,
    OrderRejectedError,
    OrderValidationError,
    UnauthenticatedError,
)
from src.pm_exchange.domain.models import ExchangeOrderResult
from src.pm_order.application.schemas import (
    OrderListResponse,
    OrderResponse,
    StoreOrderRequest,
    to_exchange_int,
)
from src.pm_order.domain.models import Order
from src.pm_order.domain.repository import OrderRepositoryProtocol
from src.pm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderSubmitter(Protocol):
    async def submit_order(self, order_payload: dict[str, Any]) -> ExchangeOrderResult: ...


class OrderUser(Protocol):
    id: str
    address: str
    referred_by_user_id: str | None


def _validate(payload: dict[str, Any]) -> StoreOrderRequest:
    try:
        return StoreOrderRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        raise OrderValidationError(field, f"{field}: {first['msg']}") from None


def _rejection_payload(exc: ExchangeError) -> Any:
    try:
        return json.loads(exc.body)
    except ValueError:
        return {"error": exc.body}


class OrderSubmissionService:
    def __init__(
        self,
        exchange: OrderSubmitter,
        fee_settings: FeeSettingsService,
        referrals: ReferralService,
        session_factory: async_sessionmaker[AsyncSession],
        repo: OrderRepositoryProtocol | None = None,
    ) -> None:
        self._exchange = exchange
        self._fee_settings = fee_settings
        self._referrals = referrals
        self._session_factory = session_factory
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    async def _load_fee_settings(self) -> FeeSettings:
        async with self._session_factory() as db:
            return await self._fee_settings.get_fee_settings(db)

    async def _load_referral(self, user_id: str) -> AffiliateReferral | None:
        async with self._session_factory() as db:
            return await self._referrals.get_referral(db, user_id)

    def _build_exchange_payload(
        self,
        req: StoreOrderRequest,
        user: OrderUser,
        fees: FeeSettings,
        referral: AffiliateReferral | None,
    ) -> dict[str, Any]:
        is_limit = req.type == OrderType.LIMIT
        return {
            "fee_rate_bps": fees.trade_fee_bps,
            "taker_address": user.address,
            "maker_address": user.address,
            "token_id": req.token_id,
            "condition_id": req.condition_id,
            "salt": settings.ORDER_SALT,
            "condition_expires_at": settings.ORDER_CONDITION_EXPIRES_AT,
            "side": req.side,
            "type": OrderType(req.type).name,
            "maker_amount": to_exchange_int(req.maker_amount),
            "price": to_exchange_int(req.price) if is_limit else None,
            "shares": to_exchange_int(req.shares) if is_limit else None,
            "referrer": settings.FEE_RECIPIENT_WALLET,
            "affiliate": referral.affiliate_address if referral else None,
            "affiliate_percentage": fees.affiliate_share_bps,
        }

    async def submit_order(
        self, user: OrderUser | None, payload: dict[str, Any]
    ) -> OrderResponse:
        # -- Validating --
        if user is None:
            raise UnauthenticatedError()
        req = _validate(payload)

        # -- Submitting --
        fees, referral = await asyncio.gather(
            self._load_fee_settings(), self._load_referral(user.id)
        )
        affiliate_user_id = user.referred_by_user_id or (
            referral.affiliate_user_id if referral else None
        )
        split: FeeSplit = compute_fee_split(
            fees.trade_fee_bps,
            fees.affiliate_share_bps,
            has_affiliate=affiliate_user_id is not None,
        )

        exchange_payload = self._build_exchange_payload(req, user, fees, referral)
        try:
            result = await self._exchange.submit_order(exchange_payload)
        except ExchangeError as exc:
            logger.warning(
                "Exchange rejected order for user %s: %d %s", user.id, exc.status_code, exc.body
            )
            raise OrderRejectedError(exc.status_code, _rejection_payload(exc)) from exc

        # -- Submitted → Persisted --
        order = Order(
            user_id=user.id,
            condition_id=req.condition_id,
            token_id=req.token_id,
            side=req.side,
            type=req.type,
            maker_address=user.address,
            taker_address=user.address,
            referrer=settings.FEE_RECIPIENT_WALLET,
            fee_rate_bps=fees.trade_fee_bps,
            trade_fee_bps=fees.trade_fee_bps,
            affiliate_share_bps=fees.affiliate_share_bps if affiliate_user_id else 0,
            affiliate_fee_amount=split.affiliate_fee_amount,
            fork_fee_amount=split.fork_fee_amount,
            affiliate_user_id=affiliate_user_id,
            affiliate=exchange_payload["affiliate"],
            affiliate_percentage=fees.affiliate_share_bps,
            maker_amount=exchange_payload["maker_amount"],
            price=exchange_payload["price"],
            shares=exchange_payload["shares"],
            salt=settings.ORDER_SALT,
            expiration=parse_timestamp(settings.ORDER_CONDITION_EXPIRES_AT),
            exchange_order_id=result.order_id,
        )
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    saved = await self._repo.save(order, db)
        except Exception as exc:
            logger.error(
                "Order accepted by exchange but not stored locally: exchange_order_id=%s user=%s",
                result.order_id,
                user.id,
                exc_info=exc,
            )
            raise OrderPersistFailedError() from exc

        logger.info(
            "Stored order %s (exchange %s) fee split affiliate=%s fork=%s",
            saved.id,
            result.order_id,
            split.affiliate_fee_amount,
            split.fork_fee_amount,
        )
        return OrderResponse.from_domain(saved)

    async def get_order(self, db: AsyncSession, order_id: str, user_id: str) -> OrderResponse:
        order = await self._repo.get_by_id(order_id, db)
        # other users' orders are reported as missing
        if order is None or order.user_id != user_id:
            raise OrderNotFoundError(order_id)
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        condition_id: str | None,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        orders = await self._repo.list_by_user(
            user_id=user_id,
            condition_id=condition_id.strip().lower() if condition_id else None,
            status=status,
            limit=limit + 1,
            cursor_id=cursor,
            db=db,
        )
        has_more = len(orders) > limit
        if has_more:
            orders = orders[:limit]
        next_cursor = orders[-1].id if has_more else None
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in orders],
            next_cursor=next_cursor,
            has_more=has_more,
        )
