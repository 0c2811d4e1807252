"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports all repository implementations and the DI factory.
"""

from src.infrastructure.persistence.models import *  # noqa: F401, F403
from src.infrastructure.persistence.models import __all__ as _orm_all
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlAssetClassRepository,
    SqlAuditLog,
    SqlCriteriaRepository,
    SqlExchangeRateRepository,
    SqlInvestmentRepository,
    SqlPortfolioRepository,
    SqlRecommendationRepository,
    SqlScoreRepository,
    SqlUnitOfWork,
    get_repositories,
)

__all__ = _orm_all + [
    "Repositories",
    "SqlCriteriaRepository",
    "SqlScoreRepository",
    "SqlPortfolioRepository",
    "SqlAssetClassRepository",
    "SqlInvestmentRepository",
    "SqlRecommendationRepository",
    "SqlExchangeRateRepository",
    "SqlAuditLog",
    "SqlUnitOfWork",
    "get_repositories",
]
