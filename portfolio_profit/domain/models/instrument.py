"""
DOMAIN MODEL - INSTRUMENT

Identity wrapper for a tradable symbol. The only way to obtain one is
through the validating factory, which asks the price source whether the
symbol exists.
"""

from __future__ import annotations

from dataclasses import dataclass

from portfolio_profit.domain.errors import NotFound
from portfolio_profit.infrastructure.market_data.types import PriceSource


@dataclass(frozen=True)
class Instrument:
    """
    Tradable symbol. Equality and hash use the identifier only
    (case sensitive, exact match).
    """
    identifier: str

    @classmethod
    async def create(cls, identifier: str, price_source: PriceSource) -> "Instrument":
        """
        Validate ``identifier`` against the price source and wrap it.

        Raises:
            NotFound: If the provider has no quote at all for the identifier
            ProviderError: If the provider call itself fails
        """
        if not await price_source.exists(identifier):
            raise NotFound(identifier)
        return cls(identifier)

    def __str__(self) -> str:
        return self.identifier
