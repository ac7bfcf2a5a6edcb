"""HTTP surface tests over ASGITransport with services stubbed on app.state."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.main import app
from src.pm_admin.application.service import FeeSettingsOut
from src.pm_affiliate.domain.models import FeeSettings
from src.pm_common.database import get_db_session
from src.pm_common.errors import EventNotFoundError, OrderRejectedError, UnauthenticatedError
from src.pm_gateway.auth.dependencies import get_optional_user
from src.pm_market.application.schemas import EventMarketsResponse, OrderbookResponse
from src.pm_order.application.schemas import OrderResponse


async def _fake_db():
    yield MagicMock()


def _user(is_admin: bool = False) -> MagicMock:
    return MagicMock(id="u-1", address="0xUser", referred_by_user_id=None,
                     is_admin=is_admin, is_active=True)


@pytest.fixture(autouse=True)
def stub_app(monkeypatch):
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=1)

    async def _get_redis():
        return redis

    monkeypatch.setattr("src.pm_gateway.middleware.rate_limit.get_redis", _get_redis)
    app.dependency_overrides[get_db_session] = _fake_db
    app.state.market_service = MagicMock()
    app.state.order_service = MagicMock()
    app.state.fee_settings_service = MagicMock()
    yield
    app.dependency_overrides.clear()


def _login(user) -> None:
    async def _current():
        return user

    app.dependency_overrides[get_optional_user] = _current


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestMarketRoutes:
    @pytest.mark.asyncio
    async def test_event_markets_envelope(self, client) -> None:
        app.state.market_service.get_event_markets = AsyncMock(
            return_value=EventMarketsResponse(
                event_id="ev-1", slug="rain", title="Rain", markets=[], refresh_triggered=True
            )
        )
        resp = await client.get("/api/v1/events/rain/markets")
        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["data"]["refresh_triggered"] is True
        assert body["request_id"].startswith("req_")

    @pytest.mark.asyncio
    async def test_unknown_event_404(self, client) -> None:
        app.state.market_service.get_event_markets = AsyncMock(
            side_effect=EventNotFoundError("nope")
        )
        resp = await client.get("/api/v1/events/nope/markets")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3003

    @pytest.mark.asyncio
    async def test_orderbook_requires_token(self, client) -> None:
        resp = await client.get("/api/v1/orderbook")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_orderbook_passthrough(self, client) -> None:
        app.state.market_service.get_orderbook = AsyncMock(
            return_value=OrderbookResponse(token_id="t-1", book={"bids": [], "asks": []})
        )
        resp = await client.get("/api/v1/orderbook", params={"token_id": "t-1"})
        assert resp.json()["data"]["book"] == {"bids": [], "asks": []}


class TestOrderRoutes:
    @pytest.mark.asyncio
    async def test_anonymous_submit_is_401(self, client) -> None:
        _login(None)
        app.state.order_service.submit_order = AsyncMock(side_effect=UnauthenticatedError())
        resp = await client.post("/api/v1/orders", json={"token_id": "t"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Unauthenticated."

    @pytest.mark.asyncio
    async def test_rejection_body_is_verbatim(self, client) -> None:
        _login(_user())
        app.state.order_service.submit_order = AsyncMock(
            side_effect=OrderRejectedError(400, {"error": "insufficient balance"})
        )
        resp = await client.post("/api/v1/orders", json={"token_id": "t"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "insufficient balance"}

    @pytest.mark.asyncio
    async def test_created(self, client) -> None:
        _login(_user())
        app.state.order_service.submit_order = AsyncMock(
            return_value=OrderResponse(
                id="ord-1", exchange_order_id="ex-1", condition_id="0xabc", token_id="t",
                side=0, type=1, status="open", maker_address="0xUser", maker_amount=10,
                price=45, shares=10, fee_rate_bps=100, trade_fee_bps=100,
                affiliate_share_bps=0, affiliate_fee_amount=Decimal("0"),
                fork_fee_amount=Decimal("0.02"), affiliate_user_id=None,
            )
        )
        resp = await client.post("/api/v1/orders", json={"token_id": "t"})
        assert resp.status_code == 201
        assert resp.json()["data"]["fork_fee_amount"] == "0.02"

    @pytest.mark.asyncio
    async def test_list_requires_auth(self, client) -> None:
        _login(None)
        resp = await client.get("/api/v1/orders")
        assert resp.status_code == 401


class TestAdminRoutes:
    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client) -> None:
        _login(_user(is_admin=False))
        resp = await client.get("/api/v1/admin/fee-settings")
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_update_validates_range(self, client) -> None:
        _login(_user(is_admin=True))
        resp = await client.put(
            "/api/v1/admin/fee-settings",
            json={"trade_fee_percent": "9.5", "affiliate_share_percent": "40"},
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_update(self, client) -> None:
        _login(_user(is_admin=True))
        app.state.fee_settings_service.update_fee_settings = AsyncMock(
            return_value=FeeSettings(150, 4000)
        )
        resp = await client.put(
            "/api/v1/admin/fee-settings",
            json={"trade_fee_percent": "1.5", "affiliate_share_percent": "40"},
        )
        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["trade_fee_bps"] == 150
        assert Decimal(data["trade_fee_percent"]) == Decimal("1.5")
        assert FeeSettingsOut.model_validate(data).affiliate_share_bps == 4000
