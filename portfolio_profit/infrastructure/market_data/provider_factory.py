"""
Price source factory (config-driven).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from portfolio_profit.config import Settings
from portfolio_profit.infrastructure.market_data.finnhub_provider import FinnhubPriceSource
from portfolio_profit.infrastructure.market_data.types import PriceSource
from portfolio_profit.infrastructure.market_data.yfinance_provider import YFinancePriceSource

PROVIDERS = ("finnhub", "yfinance")


def _build_provider(name: str, settings: Settings, market_config: Dict[str, Any]) -> PriceSource:
    name = (name or "").strip().lower()
    if name == "finnhub":
        finnhub_cfg = market_config.get("finnhub", {}) or {}
        api_key = (settings.FINNHUB_API_KEY or "").strip()
        if not api_key:
            raise ValueError("Finnhub API key missing")
        return FinnhubPriceSource(
            api_key=api_key,
            base_url=finnhub_cfg.get("base_url", settings.FINNHUB_BASE_URL),
            timeout_seconds=float(market_config.get("timeout", settings.HTTP_TIMEOUT_SECONDS)),
            cache_ttl_seconds=int(market_config.get("cache_ttl", settings.CACHE_TTL_SECONDS)),
        )
    if name == "yfinance":
        yf_cfg = market_config.get("yfinance", {}) or {}
        return YFinancePriceSource(auto_adjust=bool(yf_cfg.get("auto_adjust", False)))

    raise ValueError(f"Unknown market data provider: {name!r} (expected one of {', '.join(PROVIDERS)})")


def get_price_source(
    settings: Settings,
    app_config: Optional[Dict[str, Any]] = None,
    provider: Optional[str] = None,
) -> PriceSource:
    """
    Build the configured price source.

    Precedence for the provider name: explicit ``provider`` argument,
    then ``market_data.provider`` in app.yml, then MARKET_DATA_PROVIDER.

    Raises:
        ValueError: Unknown provider or missing credentials
    """
    market_config = (app_config or {}).get("market_data", {}) or {}
    name = provider or market_config.get("provider") or settings.MARKET_DATA_PROVIDER
    return _build_provider(name, settings, market_config)
