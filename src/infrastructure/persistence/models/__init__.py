"""ORM model registry: imports all layer modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from src.infrastructure.persistence.models.criteria import CriteriaVersion
from src.infrastructure.persistence.models.portfolio import (
    AssetClass,
    Investment,
    Portfolio,
    PortfolioAsset,
)
from src.infrastructure.persistence.models.scores import AssetScore, ScoreHistory
from src.infrastructure.persistence.models.recommendations import (
    Recommendation,
    RecommendationItem,
)
from src.infrastructure.persistence.models.exchange import ExchangeRate
from src.infrastructure.persistence.models.audit import CalculationEvent

__all__ = [
    # criteria
    "CriteriaVersion",
    # portfolio
    "Portfolio",
    "AssetClass",
    "PortfolioAsset",
    "Investment",
    # scoring
    "AssetScore",
    "ScoreHistory",
    # recommendations
    "Recommendation",
    "RecommendationItem",
    # market data
    "ExchangeRate",
    # audit
    "CalculationEvent",
]
