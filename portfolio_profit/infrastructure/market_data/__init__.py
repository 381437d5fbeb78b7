"""
Market data package: the price source contract and its providers.
"""

from portfolio_profit.infrastructure.market_data.types import PriceSource

__all__ = ["PriceSource"]
