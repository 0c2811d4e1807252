"""Unit-of-work interface for multi-write atomic operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from .audit import AuditLog
from .portfolios import InvestmentRepository, PortfolioRepository
from .recommendations import RecommendationRepository

R = TypeVar("R")


@dataclass
class TransactionRepositories:
    """Repositories bound to one open transaction."""

    portfolios: PortfolioRepository
    recommendations: RecommendationRepository
    investments: InvestmentRepository
    audit: AuditLog


class UnitOfWork(ABC):
    @abstractmethod
    async def run_in_transaction(
        self, work: Callable[[TransactionRepositories], Awaitable[R]]
    ) -> R:
        """Run ``work`` inside one transaction.

        The transaction commits when ``work`` returns and rolls back when it
        raises; by the time this coroutine returns the commit has happened.
        """
