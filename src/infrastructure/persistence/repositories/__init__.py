"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes and the get_repositories() factory function
for wiring at the application boundary (FastAPI dependency injection).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .audit import SqlAuditLog
from .criteria import SqlCriteriaRepository
from .exchange_rates import SqlExchangeRateRepository
from .portfolios import (
    SqlAssetClassRepository,
    SqlInvestmentRepository,
    SqlPortfolioRepository,
)
from .recommendations import SqlRecommendationRepository
from .scores import SqlScoreRepository
from .unit_of_work import SqlUnitOfWork


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    criteria: SqlCriteriaRepository
    scores: SqlScoreRepository
    portfolios: SqlPortfolioRepository
    asset_classes: SqlAssetClassRepository
    investments: SqlInvestmentRepository
    recommendations: SqlRecommendationRepository
    exchange_rates: SqlExchangeRateRepository
    audit: SqlAuditLog


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

    Intended for use as a FastAPI dependency:

        async def handler(
            session: AsyncSession = Depends(get_session),
        ) -> ...:
            repos = get_repositories(session)
            portfolio = await repos.portfolios.get_for_user(user_id)
    """
    return Repositories(
        criteria=SqlCriteriaRepository(session),
        scores=SqlScoreRepository(session),
        portfolios=SqlPortfolioRepository(session),
        asset_classes=SqlAssetClassRepository(session),
        investments=SqlInvestmentRepository(session),
        recommendations=SqlRecommendationRepository(session),
        exchange_rates=SqlExchangeRateRepository(session),
        audit=SqlAuditLog(session),
    )


__all__ = [
    "SqlCriteriaRepository",
    "SqlScoreRepository",
    "SqlPortfolioRepository",
    "SqlAssetClassRepository",
    "SqlInvestmentRepository",
    "SqlRecommendationRepository",
    "SqlExchangeRateRepository",
    "SqlAuditLog",
    "SqlUnitOfWork",
    "Repositories",
    "get_repositories",
]
