"""SQLAlchemy implementation of UnitOfWork.

Each run_in_transaction call opens its own session from the factory so the
commit is complete when the call returns, independent of any
request-scoped session.
"""

from __future__ import annotations

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.repositories.unit_of_work import TransactionRepositories, UnitOfWork

from .audit import SqlAuditLog
from .portfolios import SqlInvestmentRepository, SqlPortfolioRepository
from .recommendations import SqlRecommendationRepository

R = TypeVar("R")


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def run_in_transaction(
        self, work: Callable[[TransactionRepositories], Awaitable[R]]
    ) -> R:
        async with self._session_factory() as session:
            async with session.begin():
                repos = TransactionRepositories(
                    portfolios=SqlPortfolioRepository(session),
                    recommendations=SqlRecommendationRepository(session),
                    investments=SqlInvestmentRepository(session),
                    audit=SqlAuditLog(session),
                )
                return await work(repos)
