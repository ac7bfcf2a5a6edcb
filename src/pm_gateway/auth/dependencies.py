"""FastAPI dependencies resolving the caller from a Bearer token.

get_optional_user returns None for anonymous callers instead of failing, so
the order pipeline can report Unauthenticated itself as its first state.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    NotAuthorizedError,
    UnauthenticatedError,
)
from src.pm_gateway.auth.jwt_handler import decode_access_token
from src.pm_gateway.user.db_models import UserModel

_bearer = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel | None:
    """Resolve the Bearer token to an active user, or None when absent/invalid."""
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidCredentialsError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return None
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def get_current_user(
    user: UserModel | None = Depends(get_optional_user),
) -> UserModel:
    if user is None:
        raise UnauthenticatedError()
    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if not current_user.is_admin:
        raise NotAuthorizedError()
    return current_user
