"""
RETURN ENGINE

Point-to-point and annualized profit of a basket over a date range.

RESPONSIBILITIES:
- Fan out per-holding price fetches concurrently
- Reduce per-instrument returns into a weighted basket figure
- Turn provider gaps into typed domain errors

RULES:
- Read-only: never mutates the basket
- No retries, no timeouts (owned by the price source)
- First failed fetch cancels the rest of the call
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime
from typing import Awaitable, List, Sequence, Tuple, TypeVar

from portfolio_profit.domain.errors import InsufficientHistory, NoData, NoPriceData
from portfolio_profit.domain.models import Basket, Instrument
from portfolio_profit.infrastructure.market_data.types import PriceSource

T = TypeVar("T")

TRADING_DAYS_PER_YEAR = 252


def average_daily_return(prices: Sequence[float]) -> float:
    """
    Mean of the day-over-day rates of return ``p[i+1] / p[i] - 1``.

    Raises:
        ValueError: If fewer than two prices are given
    """
    if len(prices) < 2:
        raise ValueError(f"Need at least 2 prices, got {len(prices)}")

    daily = [current / previous - 1.0 for previous, current in zip(prices, prices[1:])]
    return math.fsum(daily) / len(daily)


def annualize(avg_daily_return: float, periods: int = TRADING_DAYS_PER_YEAR) -> float:
    """Compound an average daily return over ``periods`` trading days."""
    return (1.0 + avg_daily_return) ** periods - 1.0


async def gather_or_cancel(aws: Sequence[Awaitable[T]]) -> List[T]:
    """
    Run awaitables concurrently and return their results in input order.

    As soon as one fails the others are cancelled and that first
    exception is raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.wait(tasks)
        raise

    failed = [task for task in done if not task.cancelled() and task.exception() is not None]
    if failed:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)
        raise failed[0].exception()

    return [task.result() for task in tasks]


class ReturnEngine:
    """
    Return Engine
    Computes basket profit from a price source passed in explicitly.
    """

    def __init__(self, price_source: PriceSource):
        self.price_source = price_source

    async def price_at(self, instrument: Instrument, date: datetime) -> float:
        """
        Latest close on or before ``date`` (4 calendar day lookback).

        Raises:
            NoPriceData: If no trading day falls inside the lookback window
        """
        try:
            return await self.price_source.latest_price_on_or_before(instrument.identifier, date)
        except NoPriceData:
            raise
        except NoData as exc:
            raise NoPriceData(exc.identifier, exc.date) from exc

    async def instrument_return(self, instrument: Instrument, from_: datetime, to: datetime) -> float:
        end_price, start_price = await gather_or_cancel([
            self.price_at(instrument, to),
            self.price_at(instrument, from_),
        ])
        return end_price / start_price - 1.0

    async def profit(self, basket: Basket, from_: datetime, to: datetime) -> float:
        """
        Profit of holding the basket from ``from_`` to ``to``.

        Each holding contributes ``weight * investment * (p_to / p_from - 1)``.

        Raises:
            NoPriceData: If a price at either end is missing
            ProviderError: If the price source fails
        """
        holdings: List[Tuple[Instrument, float]] = list(basket.holdings.items())
        returns = await gather_or_cancel([
            self.instrument_return(instrument, from_, to)
            for instrument, _ in holdings
        ])

        return math.fsum(
            instrument_return * basket.investment * weight
            for instrument_return, (_, weight) in zip(returns, holdings)
        )

    async def instrument_average_daily_return(
        self,
        instrument: Instrument,
        from_: datetime,
        to: datetime,
    ) -> float:
        prices = await self.price_source.daily_prices(instrument.identifier, from_, to)
        if len(prices) < 2:
            raise InsufficientHistory(instrument.identifier, len(prices))
        return average_daily_return(prices)

    async def average_daily_return(self, basket: Basket, from_: datetime, to: datetime) -> float:
        """Weighted average daily return of the basket over ``[from_, to]``."""
        holdings: List[Tuple[Instrument, float]] = list(basket.holdings.items())
        averages = await gather_or_cancel([
            self.instrument_average_daily_return(instrument, from_, to)
            for instrument, _ in holdings
        ])

        return math.fsum(
            average * weight
            for average, (_, weight) in zip(averages, holdings)
        )

    async def annualized_profit(self, basket: Basket, from_: datetime, to: datetime) -> float:
        """
        Expected profit per year, compounding the basket's average daily
        return over 252 trading days.

        Raises:
            InsufficientHistory: If any holding has fewer than 2 closes in range
            ProviderError: If the price source fails
        """
        avg_daily_return = await self.average_daily_return(basket, from_, to)
        return annualize(avg_daily_return) * basket.investment
