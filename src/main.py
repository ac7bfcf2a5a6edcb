"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.pm_admin.api.router import router as admin_router
from src.pm_affiliate.application.service import FeeSettingsService, ReferralService
from src.pm_common.cache import TTLCache
from src.pm_common.database import async_session_factory, engine
from src.pm_common.errors import AppError, OrderRejectedError
from src.pm_common.redis_client import close_redis, get_redis
from src.pm_common.response import error_response
from src.pm_exchange.application.batch_fetcher import BatchFetcher
from src.pm_exchange.infrastructure.client import ExchangeClient
from src.pm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_market.application.service import MarketApplicationService
from src.pm_market.application.sync_service import BackgroundRefresher, SnapshotSyncService
from src.pm_order.api.router import router as order_router
from src.pm_order.application.service import OrderSubmissionService

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, exchange: ExchangeClient) -> None:
    """Wire the long-lived services onto app.state (one instance per process)."""
    fee_cache = TTLCache(
        max_entries=settings.CACHE_MAX_ENTRIES,
        default_ttl=settings.FEE_SETTINGS_CACHE_TTL_SECONDS,
    )
    orderbook_cache = TTLCache(
        max_entries=settings.CACHE_MAX_ENTRIES,
        default_ttl=settings.ORDERBOOK_CACHE_TTL_SECONDS,
    )
    sync_service = SnapshotSyncService(BatchFetcher(exchange), async_session_factory)
    refresher = BackgroundRefresher(sync_service)
    fee_settings_service = FeeSettingsService(fee_cache)

    app.state.exchange = exchange
    app.state.refresher = refresher
    app.state.fee_settings_service = fee_settings_service
    app.state.market_service = MarketApplicationService(
        sync_service, refresher, exchange, orderbook_cache
    )
    app.state.order_service = OrderSubmissionService(
        exchange, fee_settings_service, ReferralService(), async_session_factory
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, build services. Shutdown: drain syncs, dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    exchange = ExchangeClient()
    build_services(app, exchange)
    logger.info("Exchange client targeting %s", exchange.base_url)
    yield
    # Shutdown
    await app.state.refresher.drain()
    await exchange.close()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(OrderRejectedError)
async def order_rejected_handler(request: Request, exc: OrderRejectedError) -> JSONResponse:
    # Exchange rejection body goes back as-is, outside the ApiResponse envelope
    return JSONResponse(status_code=exc.http_status, content=exc.payload)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(market_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
