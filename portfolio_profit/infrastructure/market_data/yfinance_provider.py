"""
YFinance Price Source
Keyless Yahoo Finance alternative to the Finnhub provider.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import List

import pandas as pd
import yfinance as yf

from portfolio_profit.domain.errors import NoData, ProviderError
from portfolio_profit.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 4


class YFinancePriceSource:
    """
    Yahoo Finance price source
    Async-safe via thread offloading
    """

    def __init__(self, auto_adjust: bool = False):
        self.auto_adjust = auto_adjust

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    async def _history(self, identifier: str, start: date, end: date) -> pd.DataFrame:
        """
        Daily history for ``[start, end]``; yfinance treats ``end`` as
        exclusive, so one day is added.
        """
        ticker = yf.Ticker(identifier)
        try:
            return await asyncio.to_thread(
                ticker.history,
                start=start.isoformat(),
                end=(end + timedelta(days=1)).isoformat(),
                interval="1d",
                auto_adjust=self.auto_adjust,
            )
        except Exception as exc:
            raise ProviderError(f"Failed to fetch prices for {identifier}: {exc}") from exc

    async def _closes(self, identifier: str, start: date, end: date) -> List[float]:
        hist = await self._history(identifier, start, end)
        if hist is None or hist.empty or "Close" not in hist:
            return []
        closes = [float(close) for close in hist["Close"].dropna()]
        if any(close <= 0.0 for close in closes):
            raise ProviderError(f"Non-positive closing price for {identifier}")
        return closes

    # ------------------------------------------------------------------
    # PRICE SOURCE CONTRACT
    # ------------------------------------------------------------------

    async def latest_price_on_or_before(self, identifier: str, date: datetime) -> float:
        day = ensure_utc(date).date()
        closes = await self._closes(identifier, day - timedelta(days=LOOKBACK_DAYS), day)
        if not closes:
            raise NoData(identifier, date)
        return closes[-1]

    async def daily_prices(self, identifier: str, from_: datetime, to: datetime) -> List[float]:
        return await self._closes(identifier, ensure_utc(from_).date(), ensure_utc(to).date())

    async def exists(self, identifier: str) -> bool:
        try:
            await self.latest_price_on_or_before(identifier, utc_now())
        except NoData:
            logger.warning(f"No recent quotes for {identifier}")
            return False
        return True
