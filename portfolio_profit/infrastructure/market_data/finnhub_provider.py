"""
Finnhub Price Source
Daily closing prices from the Finnhub stock candle API.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from portfolio_profit.domain.errors import NoData, ProviderError
from portfolio_profit.utils.time import end_of_day_utc, ensure_utc, start_of_day_utc, to_unix, utc_now

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 4


class FinnhubPriceSource:
    """
    Finnhub provider for US equities.

    Windows are widened to whole UTC days: daily candles are stamped at
    midnight, so ``[start of first day, end of last day]`` covers exactly
    the trading days in the requested range.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://finnhub.io/api/v1",
        timeout_seconds: float = 30.0,
        cache_ttl_seconds: int = 60,
        client: Optional[httpx.AsyncClient] = None,
    ):
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValueError("Finnhub API key missing")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self._client = client
        self._cache: Dict[str, tuple[float, Dict[str, Any]]] = {}

    def _cache_get(self, key: str) -> Optional[Dict[str, Any]]:
        cached = self._cache.get(key)
        if not cached:
            return None
        ts, value = cached
        if time.time() - ts > self.cache_ttl_seconds:
            del self._cache[key]
            return None
        return value

    def _cache_set(self, key: str, value: Dict[str, Any]) -> None:
        self._cache[key] = (time.time(), value)

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, params=params)
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.get(url, params=params)

    async def _request_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._get(url, params)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Finnhub request failed: {exc}") from exc

        if response.status_code != 200:
            raise ProviderError(f"Finnhub API {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("Finnhub returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise ProviderError(f"Unexpected Finnhub payload type: {type(payload).__name__}")
        if "error" in payload:
            raise ProviderError(f"Finnhub error: {payload['error']}")
        return payload

    async def _candles(self, identifier: str, start: datetime, end: datetime) -> Dict[str, Any]:
        start_ts = to_unix(start)
        end_ts = to_unix(end)
        cache_key = f"candle:{identifier}:{start_ts}:{end_ts}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        logger.debug(f"Fetching daily candles for {identifier} [{start.date()} .. {end.date()}]")
        payload = await self._request_json(
            f"{self.base_url}/stock/candle",
            params={
                "symbol": identifier,
                "resolution": "D",
                "from": start_ts,
                "to": end_ts,
                "token": self.api_key,
            },
        )
        self._cache_set(cache_key, payload)
        return payload

    @staticmethod
    def _closes(identifier: str, payload: Dict[str, Any]) -> List[float]:
        status = payload.get("s")
        if status == "no_data":
            return []
        if status != "ok":
            raise ProviderError(f"Unexpected Finnhub status for {identifier}: {status!r}")

        try:
            closes = [float(close) for close in payload.get("c") or []]
        except (TypeError, ValueError) as exc:
            raise ProviderError(f"Malformed closing prices for {identifier}") from exc

        if any(not close > 0.0 for close in closes):
            raise ProviderError(f"Non-positive closing price for {identifier}")
        return closes

    # ------------------------------------------------------------------
    # PRICE SOURCE CONTRACT
    # ------------------------------------------------------------------

    async def latest_price_on_or_before(self, identifier: str, date: datetime) -> float:
        """
        Latest close at or before ``date``, looking back 4 calendar days
        so weekends and holidays resolve to the previous session.
        """
        date = ensure_utc(date)
        start = start_of_day_utc((date - timedelta(days=LOOKBACK_DAYS)).date())
        end = end_of_day_utc(date.date())

        closes = self._closes(identifier, await self._candles(identifier, start, end))
        if not closes:
            raise NoData(identifier, date)
        return closes[-1]

    async def daily_prices(self, identifier: str, from_: datetime, to: datetime) -> List[float]:
        """Closes for every trading day in the range; [] when nothing traded."""
        start = start_of_day_utc(ensure_utc(from_).date())
        end = end_of_day_utc(ensure_utc(to).date())
        return self._closes(identifier, await self._candles(identifier, start, end))

    async def exists(self, identifier: str) -> bool:
        try:
            await self.latest_price_on_or_before(identifier, utc_now())
        except NoData:
            logger.warning(f"No recent quotes for {identifier}")
            return False
        return True
