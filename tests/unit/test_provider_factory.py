import pytest

from portfolio_profit.config import load_settings
from portfolio_profit.infrastructure.market_data.finnhub_provider import FinnhubPriceSource
from portfolio_profit.infrastructure.market_data.provider_factory import get_price_source
from portfolio_profit.infrastructure.market_data.yfinance_provider import YFinancePriceSource


@pytest.fixture
def settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("MARKET_DATA_PROVIDER", "FINNHUB_API_KEY", "FINNHUB_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return load_settings(FINNHUB_API_KEY="abc123")


def test_default_provider_is_finnhub(settings):
    provider = get_price_source(settings)

    assert isinstance(provider, FinnhubPriceSource)
    assert provider.api_key == "abc123"
    assert provider.base_url == "https://finnhub.io/api/v1"


def test_app_config_overrides_settings(settings):
    app_config = {
        "market_data": {
            "provider": "finnhub",
            "cache_ttl": 5,
            "timeout": 2.5,
            "finnhub": {"base_url": "https://example.test/v1/"},
        }
    }

    provider = get_price_source(settings, app_config)

    assert provider.cache_ttl_seconds == 5
    assert provider.timeout_seconds == 2.5
    assert provider.base_url == "https://example.test/v1"


def test_explicit_provider_wins(settings):
    provider = get_price_source(settings, {"market_data": {"provider": "finnhub"}}, provider="yfinance")

    assert isinstance(provider, YFinancePriceSource)


def test_finnhub_requires_key(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FINNHUB_API_KEY", raising=False)

    with pytest.raises(ValueError, match="API key"):
        get_price_source(load_settings(), {"market_data": {"provider": "finnhub"}})


def test_unknown_provider(settings):
    with pytest.raises(ValueError, match="Unknown market data provider"):
        get_price_source(settings, provider="bloomberg")
