from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from portfolio_profit.domain.errors import NoData


class StubPriceSource:
    """
    In-memory price source that records every call.

    ``quotes`` maps identifier -> {date: close}; ``series`` maps
    identifier -> closes returned for any range.
    """

    def __init__(
        self,
        quotes: Optional[Dict[str, Dict[datetime, float]]] = None,
        series: Optional[Dict[str, List[float]]] = None,
        known: Optional[List[str]] = None,
    ):
        self.quotes = quotes or {}
        self.series = series or {}
        self.known = set(known if known is not None else list(self.quotes) + list(self.series))
        self.calls: Counter = Counter()
        self.price_requests: List[Tuple[str, datetime]] = []
        self.range_requests: List[Tuple[str, datetime, datetime]] = []

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def latest_price_on_or_before(self, identifier: str, date: datetime) -> float:
        self.calls["latest_price_on_or_before"] += 1
        self.price_requests.append((identifier, date))
        by_date = self.quotes.get(identifier, {})
        if date not in by_date:
            raise NoData(identifier, date)
        return by_date[date]

    async def daily_prices(self, identifier: str, from_: datetime, to: datetime) -> List[float]:
        self.calls["daily_prices"] += 1
        self.range_requests.append((identifier, from_, to))
        return list(self.series.get(identifier, []))

    async def exists(self, identifier: str) -> bool:
        self.calls["exists"] += 1
        return identifier in self.known


@pytest.fixture
def from_date() -> datetime:
    return datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def to_date() -> datetime:
    return datetime(2024, 4, 19, tzinfo=timezone.utc)


@pytest.fixture
def stub_source():
    return StubPriceSource(known=["GOOG", "AAPL", "MSFT"])


@pytest.fixture
def make_source():
    return StubPriceSource
