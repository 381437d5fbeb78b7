from .return_engine import (
    TRADING_DAYS_PER_YEAR,
    ReturnEngine,
    annualize,
    average_daily_return,
)

__all__ = [
    "ReturnEngine",
    "TRADING_DAYS_PER_YEAR",
    "annualize",
    "average_daily_return",
]
