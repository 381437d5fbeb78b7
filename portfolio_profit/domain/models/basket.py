"""
DOMAIN MODEL - BASKET

Immutable set of (Instrument, weight) pairs plus the invested amount.

RULES:
- Weights are validated before any provider call
- Weights add up to 1.0 (within WEIGHT_SUM_TOLERANCE)
- Never mutated after construction
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from portfolio_profit.domain.errors import InvalidWeights
from portfolio_profit.domain.models.instrument import Instrument
from portfolio_profit.infrastructure.market_data.types import PriceSource

WEIGHT_SUM_TOLERANCE = 1e-6


def _merge_entries(entries: Tuple[Tuple[str, float], ...]) -> Dict[str, float]:
    """
    Check weights and fold repeated identifiers into a single weight.

    Raises:
        InvalidWeights: If the total is not 1.0 or a weight is outside (0, 1]
    """
    total = math.fsum(weight for _, weight in entries)

    if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_SUM_TOLERANCE):
        raise InvalidWeights(total)

    merged: Dict[str, float] = {}
    for identifier, weight in entries:
        if not 0.0 < weight <= 1.0:
            raise InvalidWeights(total, f"weight for {identifier} must be in (0, 1], got {weight}")
        merged[identifier] = merged.get(identifier, 0.0) + weight

    return merged


@dataclass(frozen=True)
class Basket:
    """
    Weighted basket of instruments ("portfolio").

    Use ``Basket.build`` rather than the constructor; it performs the
    weight checks and instrument validation.
    """
    holdings: Mapping[Instrument, float]
    investment: float

    @classmethod
    async def build(
        cls,
        entries: Iterable[Tuple[str, float]],
        investment: float,
        price_source: PriceSource,
    ) -> "Basket":
        """
        Build a basket from ``(identifier, weight)`` pairs.

        Args:
            entries: Identifiers and their share of the investment;
                repeated identifiers are merged by adding their weights
            investment: Amount invested, in dollars
            price_source: Provider used to validate each identifier

        Returns:
            Basket

        Raises:
            ValueError: If investment is not a positive finite number
            InvalidWeights: If weights do not sum to 1.0 (no provider calls made)
            NotFound: For the first identifier the provider does not know
        """
        entries = tuple((identifier, float(weight)) for identifier, weight in entries)

        investment = float(investment)
        if not math.isfinite(investment) or investment <= 0:
            raise ValueError(f"Investment must be a positive amount, got {investment}")

        merged = _merge_entries(entries)

        holdings: Dict[Instrument, float] = {}
        for identifier, weight in merged.items():
            instrument = await Instrument.create(identifier, price_source)
            holdings[instrument] = weight

        return cls(holdings=MappingProxyType(holdings), investment=investment)

    def weight_of(self, identifier: str) -> float:
        """Weight held in ``identifier``; raises KeyError if not held."""
        return self.holdings[Instrument(identifier)]

    def __len__(self) -> int:
        return len(self.holdings)
