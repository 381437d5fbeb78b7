"""
Domain errors raised by basket construction, price lookups and the
return engine.
"""

from datetime import datetime


class PortfolioError(Exception):
    """Base class for every failure surfaced to the caller."""
    pass


class InvalidWeights(PortfolioError):
    """Raised when basket weights do not add up to 1.0."""

    def __init__(self, total: float, reason: str = ""):
        self.total = total
        message = f"Total weight must be 1.0, got {total}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotFound(PortfolioError):
    """Raised when the provider has no data at all for an identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Instrument not found: {identifier}")


class NoData(PortfolioError):
    """Raised by a price source when no close exists in the lookback window."""

    def __init__(self, identifier: str, date: datetime):
        self.identifier = identifier
        self.date = date
        super().__init__(f"No closing price for {identifier} on or before {date.date().isoformat()}")


class NoPriceData(NoData):
    """Raised by the return engine when a required single-day price is missing."""
    pass


class InsufficientHistory(PortfolioError):
    """Raised when fewer than two closes exist in the requested range."""

    def __init__(self, identifier: str, points: int = 0):
        self.identifier = identifier
        self.points = points
        super().__init__(
            f"Need at least 2 daily closes for {identifier}, got {points}"
        )


class ProviderError(PortfolioError):
    """Raised when a price source fails to fetch or decode a response."""
    pass
