"""Portfolio, asset class and investment repository interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from uuid import UUID

from src.domain.models.portfolio import AssetClass, Investment, Portfolio

from .base import Repository


class PortfolioRepository(Repository[Portfolio]):
    """Read/write interface for Portfolio aggregates (with embedded assets)."""

    async def get(self, id: UUID) -> Portfolio | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, portfolio_id: UUID) -> Portfolio | None:
        """Return the portfolio with its assets, or None."""

    @abstractmethod
    async def get_for_user(self, user_id: UUID) -> Portfolio | None:
        """Return the user's portfolio with its assets, or None."""

    @abstractmethod
    async def increment_asset_quantity(self, asset_id: UUID, delta: Decimal) -> Decimal:
        """Add delta to a holding's quantity atomically and return the new quantity.

        The addition happens in the database, so concurrent confirmations
        against the same holding never overwrite each other.
        """


class AssetClassRepository(Repository[AssetClass]):
    """Read/write interface for user-defined asset classes."""

    async def get(self, id: UUID) -> AssetClass | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, class_id: UUID) -> AssetClass | None:
        """Return the asset class, or None."""

    @abstractmethod
    async def list_for_user(self, user_id: UUID) -> list[AssetClass]:
        """Return the user's asset classes ordered by name."""

    @abstractmethod
    async def count_for_user(self, user_id: UUID) -> int:
        """Return the number of asset classes the user owns."""


class InvestmentRepository(ABC):
    """Append-only investment ledger."""

    @abstractmethod
    async def add_many(self, investments: list[Investment]) -> list[Investment]:
        """Record executed investments."""

    @abstractmethod
    async def list_for_user(
        self, user_id: UUID, limit: int = 50, offset: int = 0
    ) -> list[Investment]:
        """Return a page of the user's investments, newest first."""
