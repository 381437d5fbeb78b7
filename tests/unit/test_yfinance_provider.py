from datetime import datetime, timezone

import pandas as pd
import pytest

import portfolio_profit.infrastructure.market_data.yfinance_provider as yfinance_module
from portfolio_profit.domain.errors import NoData, ProviderError
from portfolio_profit.infrastructure.market_data.yfinance_provider import YFinancePriceSource


def _install_fake_ticker(monkeypatch, frames, calls=None):
    class FakeTicker:
        def __init__(self, symbol):
            self.symbol = symbol

        def history(self, **kwargs):
            if calls is not None:
                calls.append((self.symbol, kwargs))
            frame = frames.get(self.symbol)
            if isinstance(frame, Exception):
                raise frame
            return frame if frame is not None else pd.DataFrame()

    monkeypatch.setattr(yfinance_module.yf, "Ticker", FakeTicker)


def _frame(closes):
    index = pd.date_range("2024-04-08", periods=len(closes), freq="B")
    return pd.DataFrame({"Close": closes}, index=index)


@pytest.mark.asyncio
async def test_latest_price_returns_last_close_in_lookback(monkeypatch):
    calls = []
    _install_fake_ticker(monkeypatch, {"GOOG": _frame([150.0, 151.0, float("nan")])}, calls)

    price = await YFinancePriceSource().latest_price_on_or_before(
        "GOOG", datetime(2024, 4, 15, 20, 0, tzinfo=timezone.utc)
    )

    assert price == 151.0
    symbol, kwargs = calls[0]
    assert symbol == "GOOG"
    assert kwargs["start"] == "2024-04-11"
    # yfinance end is exclusive
    assert kwargs["end"] == "2024-04-16"
    assert kwargs["interval"] == "1d"


@pytest.mark.asyncio
async def test_latest_price_without_rows_raises_no_data(monkeypatch):
    _install_fake_ticker(monkeypatch, {})

    with pytest.raises(NoData):
        await YFinancePriceSource().latest_price_on_or_before("NOPE", datetime(2024, 4, 15))


@pytest.mark.asyncio
async def test_daily_prices_and_empty_range(monkeypatch):
    _install_fake_ticker(monkeypatch, {"AAPL": _frame([10.0, 11.0, 12.0])})
    provider = YFinancePriceSource()
    start = datetime(2024, 4, 8, tzinfo=timezone.utc)
    end = datetime(2024, 4, 12, tzinfo=timezone.utc)

    assert await provider.daily_prices("AAPL", start, end) == [10.0, 11.0, 12.0]
    assert await provider.daily_prices("MSFT", start, end) == []


@pytest.mark.asyncio
async def test_exists(monkeypatch):
    _install_fake_ticker(monkeypatch, {"AAPL": _frame([10.0])})
    provider = YFinancePriceSource()

    assert await provider.exists("AAPL") is True
    assert await provider.exists("ZZZZ") is False


@pytest.mark.asyncio
async def test_yfinance_failure_raises_provider_error(monkeypatch):
    _install_fake_ticker(monkeypatch, {"AAPL": RuntimeError("rate limited")})

    with pytest.raises(ProviderError, match="rate limited"):
        await YFinancePriceSource().exists("AAPL")


@pytest.mark.asyncio
@pytest.mark.parametrize("closes", [[10.0, 0.0, 11.0], [-1.0]])
async def test_non_positive_close_raises_provider_error(monkeypatch, closes):
    _install_fake_ticker(monkeypatch, {"AAPL": _frame(closes)})
    provider = YFinancePriceSource()

    with pytest.raises(ProviderError, match="Non-positive closing price for AAPL"):
        await provider.daily_prices(
            "AAPL",
            datetime(2024, 4, 8, tzinfo=timezone.utc),
            datetime(2024, 4, 12, tzinfo=timezone.utc),
        )
