# src/pm_order/api/router.py
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_user, get_optional_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_order.application.service import OrderSubmissionService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(request: Request) -> OrderSubmissionService:
    return request.app.state.order_service  # type: ignore[no-any-return]


@router.post("", status_code=201)
async def submit_order(
    request: Request,
    current_user: Annotated[UserModel | None, Depends(get_optional_user)],
    service: Annotated[OrderSubmissionService, Depends(get_order_service)],
    payload: Annotated[dict[str, Any], Body()],
) -> ApiResponse:
    # The body is validated by the service so the first issue maps to OrderValidationError
    result = await service.submit_order(current_user, payload)
    return success_response(result.model_dump(mode="json"), request)


@router.get("")
async def list_orders(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[OrderSubmissionService, Depends(get_order_service)],
    condition_id: str | None = Query(None, description="Filter by condition ID"),
    status: str | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    result = await service.list_orders(db, current_user.id, condition_id, status, limit, cursor)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[OrderSubmissionService, Depends(get_order_service)],
) -> ApiResponse:
    result = await service.get_order(db, order_id, current_user.id)
    return success_response(result.model_dump(mode="json"), request)
