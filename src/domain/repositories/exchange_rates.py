"""Exchange-rate repository interface.

Like price data, rates are a time series with no single-entity CRUD
lifecycle, so this interface does not extend Repository[T].
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from src.domain.models.exchange import ExchangeRate


class ExchangeRateRepository(ABC):
    @abstractmethod
    async def find_rate(
        self, base_currency: str, quote_currency: str, at: datetime
    ) -> ExchangeRate | None:
        """Return the most recent rate for the pair with rate_date <= at, or None."""

    @abstractmethod
    async def add_many(self, rates: list[ExchangeRate]) -> int:
        """Store rates fetched from the provider; returns the number stored."""
