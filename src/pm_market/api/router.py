"""pm_market REST endpoints.

GET  /events/{slug}/markets      : cached markets; stale → background refresh
POST /events/{slug}/refresh      : awaited refresh from the exchange
GET  /outcomes/{token_id}/trades : recent trades mirrored from the exchange
GET  /orderbook?token_id=        : exchange order book pass-through
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(tags=["markets"])


def get_market_service(request: Request) -> MarketApplicationService:
    """Service instance built once in main.py's lifespan and kept on app.state."""
    return request.app.state.market_service  # type: ignore[no-any-return]


@router.get("/events/{slug}/markets")
async def get_event_markets(
    slug: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_event_markets(db, slug)
    return success_response(result.model_dump(), request)


@router.post("/events/{slug}/refresh")
async def refresh_event(
    slug: str,
    request: Request,
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.refresh_event(slug)
    return success_response(result.model_dump(), request)


@router.get("/outcomes/{token_id}/trades")
async def get_recent_trades(
    token_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await service.get_recent_trades(db, token_id, limit)
    return success_response(result.model_dump(), request)


@router.get("/orderbook")
async def get_orderbook(
    request: Request,
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    token_id: str = Query(..., min_length=1, description="Outcome token id"),
) -> ApiResponse:
    result = await service.get_orderbook(token_id)
    return success_response(result.model_dump(), request)
