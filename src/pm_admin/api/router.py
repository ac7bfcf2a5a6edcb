# src/pm_admin/api/router.py
"""Admin REST API: fee settings (admin users only)."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.service import AdminService, FeeSettingsUpdateRequest
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import require_admin
from src.pm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(request: Request) -> AdminService:
    return AdminService(request.app.state.fee_settings_service)


@router.get("/fee-settings")
async def get_fee_settings(
    request: Request,
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[AdminService, Depends(get_admin_service)],
) -> ApiResponse:
    result = await service.get_fee_settings(db)
    return success_response(result.model_dump(mode="json"), request)


@router.put("/fee-settings")
async def update_fee_settings(
    body: FeeSettingsUpdateRequest,
    request: Request,
    _admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[AdminService, Depends(get_admin_service)],
) -> ApiResponse:
    result = await service.update_fee_settings(db, body)
    return success_response(result.model_dump(mode="json"), request)
