"""
Price source protocol for type hints.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Protocol


class PriceSource(Protocol):
    async def latest_price_on_or_before(self, identifier: str, date: datetime) -> float:
        """Most recent daily close at or before ``date``; raises NoData if none."""
        ...

    async def daily_prices(self, identifier: str, from_: datetime, to: datetime) -> List[float]:
        """Closes for every trading day in ``[from_, to]``, oldest first."""
        ...

    async def exists(self, identifier: str) -> bool:
        ...
