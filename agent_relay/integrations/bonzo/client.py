from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from agent_relay.infrastructure.retry import RetryConfig, execute_with_retry
from agent_relay.integrations.cache import TtlCache

from .config import ENDPOINTS, TEXT_OPERATIONS, BonzoSettings, get_bonzo_settings

logger = logging.getLogger(__name__)

SOURCE_NAME = "Bonzo Finance API"

_DEFAULT_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Referer": "https://app.bonzo.finance/",
    "Origin": "https://app.bonzo.finance",
}


class BonzoApiError(RuntimeError):
    """Raised when the Bonzo data API cannot answer a query."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class BonzoRateLimitedError(BonzoApiError):
    """403/429 answers; Bonzo uses both for throttling, so both are retried."""


class BonzoApiClient:
    """
    Async wrapper around the Bonzo Finance v1 data API.

    State owned by one instance, alive until ``aclose()``:
      - a TTL response cache keyed by operation and account id
      - in-flight futures so concurrent calls for one URL share a request
      - the time of the last outgoing request, for the minimum interval

    One client is shared by every session of the process.
    """

    def __init__(
        self,
        settings: BonzoSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_bonzo_settings()
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.request_timeout,
            headers=_DEFAULT_HEADERS,
        )
        self._cache = TtlCache(self._settings.cache_ttl)
        self._inflight: Dict[str, asyncio.Future] = {}
        self._throttle_lock = asyncio.Lock()
        self._last_request_at = 0.0
        self._retry = RetryConfig(
            max_retries=self._settings.max_retries,
            base_delay=self._settings.backoff,
            jitter=min(1.0, self._settings.backoff),
            retryable_exceptions=(httpx.TransportError, BonzoRateLimitedError),
        )

    async def __aenter__(self) -> "BonzoApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers -------------------------------------------------
    @staticmethod
    def build_path(operation: str, account_id: str | None = None) -> str:
        try:
            path = ENDPOINTS[operation]
        except KeyError:
            raise ValueError(f"Unsupported operation: {operation}") from None
        if operation == "account_dashboard":
            if not account_id:
                raise ValueError("accountId is required for account_dashboard operation")
            path = f"{path}/{account_id}"
        return path

    async def _wait_for_slot(self) -> None:
        async with self._throttle_lock:
            elapsed = time.monotonic() - self._last_request_at
            wait = self._settings.min_interval - elapsed
            if wait > 0:
                logger.debug("Bonzo rate limiting: waiting %.2fs before request", wait)
                await asyncio.sleep(wait)
            self._last_request_at = time.monotonic()

    async def _get_once(self, path: str, as_text: bool) -> Any:
        await self._wait_for_slot()
        logger.info("Bonzo API request: %s", path)
        response = await self._client.get(path)

        if response.status_code in (403, 429):
            raise BonzoRateLimitedError(
                f"Bonzo API rate limited ({response.status_code})", response.status_code, response.text
            )
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise BonzoApiError(f"HTTP {response.status_code}: {response.reason_phrase}", response.status_code, payload)

        if as_text or not response.headers.get("content-type", "").startswith("application/json"):
            return response.text
        return response.json()

    async def _fetch(self, path: str, as_text: bool) -> Any:
        try:
            return await execute_with_retry(self._get_once, path, as_text, config=self._retry)
        except httpx.TransportError as e:
            raise BonzoApiError(f"Bonzo API unreachable: {e}") from e

    async def _fetch_shared(self, path: str, as_text: bool) -> Any:
        pending = self._inflight.get(path)
        if pending is not None:
            logger.debug("Waiting for in-flight Bonzo request for %s", path)
            return await asyncio.shield(pending)

        future = asyncio.ensure_future(self._fetch(path, as_text))
        self._inflight[path] = future
        try:
            return await asyncio.shield(future)
        finally:
            if self._inflight.get(path) is future:
                del self._inflight[path]

    # ---- public API --------------------------------------------------------
    async def query(self, operation: str, account_id: str | None = None) -> Dict[str, Any]:
        """
        Run one Bonzo operation and return the tagged result.

        Raises:
            ValueError: unknown operation, or ``account_dashboard`` without an account id
            BonzoApiError: the API failed after the retry budget
        """
        path = self.build_path(operation, account_id)
        cache_key = (operation, account_id if operation == "account_dashboard" else None)

        self._cache.purge_expired()
        hit = self._cache.get(cache_key)
        if hit is not None:
            result, age = hit
            logger.debug("Returning cached Bonzo result for %s", cache_key)
            return {**result, "cached": True, "cache_age_ms": int(age * 1000)}

        data = await self._fetch_shared(path, operation in TEXT_OPERATIONS)
        result = {
            "operation": operation,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
            "source": SOURCE_NAME,
            "api_url": f"{self._settings.base_url}{path}",
            "cached": False,
        }
        self._cache.set(cache_key, result)
        return result

    def snapshot(self) -> Dict[str, Optional[Any]]:
        """Debug view of the client state."""

        return {
            "base_url": self._settings.base_url,
            "inflight": sorted(self._inflight),
            "cache": self._cache.stats,
        }
