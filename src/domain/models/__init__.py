"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .allocation import AllocationSummary, AllocationWarning, ClassAllocation
from .audit import CalculationEvent
from .comparison import (
    AssetComparison,
    ComparisonResult,
    ComparisonSummary,
    CriteriaDifference,
)
from .criteria import CriteriaVersion, Criterion
from .enums import (
    AllocationStatus,
    CalculationEventType,
    CriterionChange,
    DifferenceType,
    Operator,
    RecommendationStatus,
    SkippedReason,
    TrendDirection,
)
from .exchange import ConversionResult, ExchangeRate
from .portfolio import AssetClass, Investment, Portfolio, PortfolioAsset
from .recommendations import (
    ConfirmationResult,
    InvestmentLine,
    Recommendation,
    RecommendationItem,
)
from .scores import (
    AssetScore,
    CriterionResult,
    Fundamentals,
    ScoreHistoryEntry,
    ScoreTrend,
    ScoringAsset,
    ScoringRun,
)

__all__ = [
    # enums
    "AllocationStatus",
    "CalculationEventType",
    "CriterionChange",
    "DifferenceType",
    "Operator",
    "RecommendationStatus",
    "SkippedReason",
    "TrendDirection",
    # criteria
    "Criterion",
    "CriteriaVersion",
    # scores
    "Fundamentals",
    "ScoringAsset",
    "CriterionResult",
    "AssetScore",
    "ScoreHistoryEntry",
    "ScoreTrend",
    "ScoringRun",
    # portfolio
    "AssetClass",
    "PortfolioAsset",
    "Portfolio",
    "Investment",
    # recommendations
    "RecommendationItem",
    "Recommendation",
    "InvestmentLine",
    "ConfirmationResult",
    # exchange
    "ExchangeRate",
    "ConversionResult",
    # comparison
    "CriteriaDifference",
    "AssetComparison",
    "ComparisonSummary",
    "ComparisonResult",
    # allocation
    "AllocationWarning",
    "ClassAllocation",
    "AllocationSummary",
    # audit
    "CalculationEvent",
]
