"""Async HTTP client for the exchange (CLOB).

Three calls are consumed:

    GET  /book?token_id=<id>                               order book display
    GET  /v1/conditions?ids=<csv>&recent_trades_limit=<n>  batched snapshots
    POST /v1/orders                                        order submission

Every call is bounded by a single wall-clock timeout (default 5s) covering
connect, send and read. There are no retries here: snapshot callers decide
their own policy, and order submission must never be replayed.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import httpx

from config.settings import settings
from src.pm_common.errors import (
    ExchangeError,
    ExchangeTimeoutError,
    ExchangeUnavailableError,
    MalformedResponseError,
)
from src.pm_exchange.domain.models import (
    ConditionSnapshot,
    ExchangeOrderResult,
    OrderBook,
)
from src.pm_exchange.infrastructure.parsing import (
    parse_condition_snapshots,
    parse_order_book,
    parse_order_result,
)

logger = logging.getLogger(__name__)


def normalize_condition_ids(condition_ids: Iterable[str]) -> list[str]:
    """Lower-case, strip and de-duplicate ids, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in condition_ids:
        if not raw:
            continue
        cid = raw.strip().lower()
        if cid:
            seen.setdefault(cid, None)
    return list(seen)


class ExchangeClient:
    """Thin async wrapper over httpx with exchange-specific error mapping.

    Args:
        base_url: Exchange root URL; trailing slashes are ignored.
        api_key: Sent as ``X-API-Key`` on every request when set.
        timeout: Hard per-call limit in seconds.
        http_client: Pre-built ``httpx.AsyncClient`` (tests pass one backed
            by ``httpx.MockTransport``).

    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.CLOB_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.CLOB_API_KEY
        self._timeout = timeout if timeout is not None else settings.CLOB_TIMEOUT_SECONDS
        self._http_client = http_client or httpx.AsyncClient(timeout=self._timeout)

    # ------------------------------------------------------------------
    # Public calls
    # ------------------------------------------------------------------

    async def fetch_order_book(self, token_id: str) -> OrderBook:
        payload = await self._request("GET", "/book", params={"token_id": token_id})
        return parse_order_book(token_id, payload)

    async def fetch_condition_snapshots(
        self, condition_ids: Iterable[str], recent_trades_limit: int = 3
    ) -> list[ConditionSnapshot]:
        ids = normalize_condition_ids(condition_ids)
        if not ids:
            return []
        payload = await self._request(
            "GET",
            "/v1/conditions",
            params={"ids": ",".join(ids), "recent_trades_limit": recent_trades_limit},
        )
        return parse_condition_snapshots(payload)

    async def submit_order(self, order_payload: dict[str, Any]) -> ExchangeOrderResult:
        """POST a signed order. Keys whose value is None are not sent."""
        body = {k: v for k, v in order_payload.items() if v is not None}
        payload = await self._request("POST", "/v1/orders", json_body=body)
        return parse_order_result(payload)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, with_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._http_client.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=self._headers(json_body is not None),
                )
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Exchange %s %s timed out after %ss", method, path, self._timeout)
            raise ExchangeTimeoutError(path, self._timeout) from exc
        except httpx.HTTPError as exc:
            raise ExchangeUnavailableError(f"{method} {path}: {exc}") from exc

        if not response.is_success:
            raise ExchangeError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{method} {path} returned invalid JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "ExchangeClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
