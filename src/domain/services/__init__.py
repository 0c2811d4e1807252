"""Domain services package."""

from .allocation import AllocationService
from .comparison import ComparisonService
from .criteria import CriteriaService
from .currency import CurrencyConverter
from .evaluator import CriteriaEvaluator
from .recommendation import RecommendationService
from .scoring import ScoringService, calculate_trend

__all__ = [
    "AllocationService",
    "ComparisonService",
    "CriteriaEvaluator",
    "CriteriaService",
    "CurrencyConverter",
    "RecommendationService",
    "ScoringService",
    "calculate_trend",
]
