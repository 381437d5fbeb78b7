"""
Command line entry point.

Builds a basket, then prints its profit and annualized profit over the
requested window.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from portfolio_profit.config import Settings, load_app_config, load_settings
from portfolio_profit.core.logging import setup_logging
from portfolio_profit.domain.errors import PortfolioError
from portfolio_profit.domain.models import Basket
from portfolio_profit.domain.services import ReturnEngine
from portfolio_profit.domain.services.return_engine import gather_or_cancel
from portfolio_profit.infrastructure.market_data.provider_factory import PROVIDERS, get_price_source
from portfolio_profit.infrastructure.market_data.types import PriceSource
from portfolio_profit.utils.time import end_of_day_utc, start_of_day_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_HOLDINGS: List[Tuple[str, float]] = [
    ("GOOG", 0.30),
    ("AAPL", 0.20),
    ("MSFT", 0.50),
]
DEFAULT_INVESTMENT = 1000.0
DEFAULT_LOOKBACK_DAYS = 50


@dataclass(frozen=True)
class ProfitReport:
    profit: float
    annualized_profit: float


def parse_holding(value: str) -> Tuple[str, float]:
    """Parse ``SYMBOL=WEIGHT``."""
    symbol, sep, weight = value.partition("=")
    symbol = symbol.strip()
    if not sep or not symbol:
        raise argparse.ArgumentTypeError(f"expected SYMBOL=WEIGHT, got {value!r}")
    try:
        return symbol, float(weight)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid weight in {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-profit",
        description="Profit and annualized profit of a weighted equity basket",
    )
    parser.add_argument("--holding", type=parse_holding, action="append", metavar="SYMBOL=WEIGHT",
                        help="Basket entry; repeat for each instrument")
    parser.add_argument("--investment", type=float, default=None, help="Amount invested, in dollars")
    parser.add_argument("--days", type=int, default=None, help="Look back this many days from today")
    parser.add_argument("--from", dest="from_date", type=date.fromisoformat, default=None,
                        help="Start date (YYYY-MM-DD), overrides --days")
    parser.add_argument("--to", dest="to_date", type=date.fromisoformat, default=None,
                        help="End date (YYYY-MM-DD), defaults to now")
    parser.add_argument("--provider", choices=PROVIDERS, default=None, help="Market data provider")
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding app.yml")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    return parser


def resolve_window(
    args: argparse.Namespace,
    portfolio_cfg: Dict[str, Any],
    now: datetime,
) -> Tuple[datetime, datetime]:
    to = end_of_day_utc(args.to_date) if args.to_date else now
    if args.from_date:
        from_ = start_of_day_utc(args.from_date)
    else:
        days = args.days
        if days is None:
            value = portfolio_cfg.get("lookback_days", DEFAULT_LOOKBACK_DAYS)
            try:
                days = int(value)
            except (TypeError, ValueError):
                raise ValueError(f"portfolio.lookback_days must be an integer, got {value!r}")
        from_ = to - timedelta(days=days)
    return from_, to


def _configured_holding(index: int, entry: Any) -> Tuple[str, float]:
    if not isinstance(entry, dict):
        raise ValueError(f"portfolio.holdings[{index}] must be a mapping with symbol and weight")
    symbol = entry.get("symbol")
    if symbol is None or not str(symbol).strip():
        raise ValueError(f"portfolio.holdings[{index}] is missing a symbol")
    if "weight" not in entry:
        raise ValueError(f"portfolio.holdings[{index}] ({symbol}) is missing a weight")
    try:
        weight = float(entry["weight"])
    except (TypeError, ValueError):
        raise ValueError(f"portfolio.holdings[{index}] ({symbol}) has an invalid weight: {entry['weight']!r}")
    return str(symbol).strip(), weight


def resolve_holdings(args: argparse.Namespace, portfolio_cfg: Dict[str, Any]) -> List[Tuple[str, float]]:
    """
    Raises:
        ValueError: If a holding in app.yml lacks a symbol or a numeric weight
    """
    if args.holding:
        return list(args.holding)
    configured = portfolio_cfg.get("holdings")
    if not configured:
        return list(DEFAULT_HOLDINGS)
    if not isinstance(configured, list):
        raise ValueError("portfolio.holdings must be a list")
    return [_configured_holding(index, entry) for index, entry in enumerate(configured)]


def resolve_investment(args: argparse.Namespace, portfolio_cfg: Dict[str, Any]) -> float:
    if args.investment is not None:
        return args.investment
    value = portfolio_cfg.get("investment", DEFAULT_INVESTMENT)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"portfolio.investment must be a number, got {value!r}")


async def run_report(
    price_source: PriceSource,
    holdings: Sequence[Tuple[str, float]],
    investment: float,
    from_: datetime,
    to: datetime,
) -> ProfitReport:
    basket = await Basket.build(holdings, investment, price_source)
    logger.info(f"Basket ready: {len(basket)} instruments, investment ${basket.investment:.2f}")

    engine = ReturnEngine(price_source)
    profit, annualized_profit = await gather_or_cancel([
        engine.profit(basket, from_, to),
        engine.annualized_profit(basket, from_, to),
    ])
    return ProfitReport(profit=profit, annualized_profit=annualized_profit)


def format_report(report: ProfitReport) -> str:
    return (
        f"profit: ${report.profit:.2f}\n"
        f"annualized profit: ${report.annualized_profit:.2f}"
    )


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = settings or load_settings()
    setup_logging(args.log_level or settings.LOG_LEVEL)

    try:
        app_config = load_app_config(args.config_dir or Path(settings.CONFIG_DIR))
        portfolio_cfg = app_config.get("portfolio") or {}
        if not isinstance(portfolio_cfg, dict):
            raise ValueError("portfolio section of app.yml must be a mapping")

        from_, to = resolve_window(args, portfolio_cfg, utc_now())
        if from_ > to:
            parser.error("--from must not be after --to")

        holdings = resolve_holdings(args, portfolio_cfg)
        investment = resolve_investment(args, portfolio_cfg)
        price_source = get_price_source(settings, app_config, provider=args.provider)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info(f"Computing profit from {from_.date()} to {to.date()}")
    try:
        report = asyncio.run(run_report(price_source, holdings, investment, from_, to))
    except PortfolioError as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
