"""JWT verification and the user-resolving dependencies."""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from config.settings import settings
from src.pm_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    NotAuthorizedError,
    UnauthenticatedError,
)
from src.pm_gateway.auth.dependencies import get_current_user, get_optional_user, require_admin
from src.pm_gateway.auth.jwt_handler import create_access_token, decode_access_token


def _creds(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _db_returning(user) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    db.execute.return_value = result
    return db


class TestJwt:
    def test_round_trip(self) -> None:
        payload = decode_access_token(create_access_token("u-1"))
        assert payload["sub"] == "u-1"
        assert payload["type"] == "access"

    def test_expired(self) -> None:
        token = create_access_token("u-1", expires_in=timedelta(seconds=-1))
        with pytest.raises(InvalidCredentialsError):
            decode_access_token(token)

    def test_wrong_secret(self) -> None:
        token = jwt.encode({"sub": "u-1", "type": "access"}, "other", algorithm="HS256")
        with pytest.raises(InvalidCredentialsError):
            decode_access_token(token)

    def test_wrong_type(self) -> None:
        token = jwt.encode(
            {"sub": "u-1", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256"
        )
        with pytest.raises(InvalidCredentialsError):
            decode_access_token(token)


class TestDependencies:
    @pytest.mark.asyncio
    async def test_no_credentials_is_anonymous(self) -> None:
        assert await get_optional_user(None, AsyncMock()) is None

    @pytest.mark.asyncio
    async def test_bad_token_is_anonymous(self) -> None:
        assert await get_optional_user(_creds("garbage"), AsyncMock()) is None

    @pytest.mark.asyncio
    async def test_resolves_user(self) -> None:
        user = MagicMock(id="u-1", is_active=True)
        resolved = await get_optional_user(_creds(create_access_token("u-1")), _db_returning(user))
        assert resolved is user

    @pytest.mark.asyncio
    async def test_disabled_user(self) -> None:
        user = MagicMock(id="u-1", is_active=False)
        with pytest.raises(AccountDisabledError):
            await get_optional_user(_creds(create_access_token("u-1")), _db_returning(user))

    @pytest.mark.asyncio
    async def test_current_user_required(self) -> None:
        with pytest.raises(UnauthenticatedError):
            await get_current_user(None)

    @pytest.mark.asyncio
    async def test_require_admin(self) -> None:
        with pytest.raises(NotAuthorizedError):
            await require_admin(MagicMock(is_admin=False))
        admin = MagicMock(is_admin=True)
        assert await require_admin(admin) is admin
