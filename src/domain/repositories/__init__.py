"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in src/infrastructure/ and are wired at the
application boundary via dependency injection.

Import from this package rather than individual modules to avoid coupling
handlers to specific repository module paths.
"""

from .audit import AuditLog
from .base import Repository
from .cache import RecommendationCache
from .criteria import CriteriaRepository
from .exchange_rates import ExchangeRateRepository
from .portfolios import AssetClassRepository, InvestmentRepository, PortfolioRepository
from .recommendations import RecommendationRepository
from .scores import ScoreRepository
from .unit_of_work import TransactionRepositories, UnitOfWork

__all__ = [
    "Repository",
    "CriteriaRepository",
    "ScoreRepository",
    "PortfolioRepository",
    "AssetClassRepository",
    "InvestmentRepository",
    "RecommendationRepository",
    "ExchangeRateRepository",
    "AuditLog",
    "RecommendationCache",
    "TransactionRepositories",
    "UnitOfWork",
]
