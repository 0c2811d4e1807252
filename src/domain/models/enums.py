"""Domain enumerations for the portfolio planner.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (FastAPI / Pydantic default behaviour).
"""

from enum import Enum


class Operator(str, Enum):
    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    EQ = "eq"
    RANGE = "range"      # inclusive [threshold, threshold_max]
    EXISTS = "exists"    # matched whenever the metric has a value

    @property
    def needs_threshold(self) -> bool:
        return self is not Operator.EXISTS


class SkippedReason(str, Enum):
    MISSING_FUNDAMENTAL = "missing_fundamental"
    DATA_STALE = "data_stale"
    INVALID_VALUE = "invalid_value"
    EVALUATION_ERROR = "evaluation_error"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class DifferenceType(str, Enum):
    """Per-asset outcome of scoring the same asset under two criteria sets."""

    IMPROVED = "improved"
    DECLINED = "declined"
    IDENTICAL = "identical"


class CriterionChange(str, Enum):
    """How a criterion differs between two criteria sets (matched by name)."""

    ONLY_A = "only_a"
    ONLY_B = "only_b"
    MODIFIED = "modified"
    IDENTICAL = "identical"


class RecommendationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class AllocationStatus(str, Enum):
    UNDER = "under"
    ON_TARGET = "on_target"
    OVER = "over"


class CalculationEventType(str, Enum):
    CALC_STARTED = "CALC_STARTED"
    INPUTS_CAPTURED = "INPUTS_CAPTURED"
    SCORES_COMPUTED = "SCORES_COMPUTED"
    RECS_INPUTS_CAPTURED = "RECS_INPUTS_CAPTURED"
    RECS_COMPUTED = "RECS_COMPUTED"
    CALC_COMPLETED = "CALC_COMPLETED"
    CALC_FAILED = "CALC_FAILED"
    INVESTMENT_RECORDED = "INVESTMENT_RECORDED"
    INVESTMENTS_CONFIRMED = "INVESTMENTS_CONFIRMED"
