"""Request and response schemas for the HTTP API.

JSON keys are camelCase; every money, percent and score field is a decimal
string.  Response models are read straight off the domain models
(from_attributes) so field names stay in one place.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.models.enums import (
    AllocationStatus,
    CriterionChange,
    DifferenceType,
    Operator,
    RecommendationStatus,
    SkippedReason,
    TrendDirection,
)
from src.domain.models.numeric import DecimalStr
from src.domain.models.recommendations import InvestmentLine
from src.domain.models.scores import Fundamentals, ScoringAsset

T = TypeVar("T")


def _reject_float(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError(
            "metric values must be decimal strings or integers, not fractional JSON numbers"
        )
    return value


# Whole JSON numbers arrive as int and stay exact; fractional ones are refused
# here rather than parsed from a float.  Non-numeric strings pass through and
# are reported per criterion as invalid_value.
MetricValue = Annotated[Any, BeforeValidator(_reject_float)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    """Every successful response is wrapped as ``{"data": ...}``."""

    data: T


class ErrorBody(BaseModel):
    error: str
    code: str
    details: dict[str, Any] | None = None


# ------------------------------------------------------------------------- #
# Requests                                                                   #
# ------------------------------------------------------------------------- #


class AssetFundamentalsIn(ApiModel):
    asset_id: UUID
    symbol: str
    fundamentals: dict[str, MetricValue] = Field(default_factory=dict)
    fetched_at: datetime | None = None
    source: str | None = None

    def to_domain(self) -> ScoringAsset:
        return ScoringAsset(
            asset_id=self.asset_id,
            symbol=self.symbol,
            fundamentals=Fundamentals(
                metrics=self.fundamentals,
                source=self.source,
                fetched_at=self.fetched_at,
            ),
        )


class CalculateScoresRequest(ApiModel):
    assets: list[AssetFundamentalsIn] = Field(min_length=1)
    criteria_version_id: UUID | None = None
    target_market: str | None = None


class GenerateRecommendationRequest(ApiModel):
    contribution: DecimalStr
    dividends: DecimalStr = Field(default="0", validate_default=True)


class InvestmentLineIn(ApiModel):
    asset_id: UUID
    actual_amount: DecimalStr
    price_per_unit: DecimalStr

    def to_domain(self) -> InvestmentLine:
        return InvestmentLine(
            asset_id=self.asset_id,
            actual_amount=self.actual_amount,
            price_per_unit=self.price_per_unit,
        )


class ConfirmInvestmentsRequest(ApiModel):
    recommendation_id: UUID
    investments: list[InvestmentLineIn] = Field(min_length=1)


class CompareCriteriaRequest(ApiModel):
    set_a_id: UUID
    set_b_id: UUID
    assets: list[AssetFundamentalsIn] = Field(default_factory=list)


class CopyCriteriaRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    target_market: str | None = None


class ConvertRequest(ApiModel):
    value: DecimalStr
    from_currency: str
    to_currency: str
    rate_date: datetime | None = None


# ------------------------------------------------------------------------- #
# Responses                                                                  #
# ------------------------------------------------------------------------- #


class CriterionResultOut(ApiModel):
    criterion_id: UUID
    criterion_name: str
    matched: bool
    points_awarded: int
    actual_value: str | None = None
    skipped_reason: SkippedReason | None = None


class AssetScoreOut(ApiModel):
    asset_id: UUID
    symbol: str
    score: DecimalStr
    criteria_version_id: UUID
    breakdown: list[CriterionResultOut]
    calculated_at: datetime


class ScoreRunOut(ApiModel):
    scores: list[AssetScoreOut]
    correlation_id: UUID
    calculated_at: datetime
    duration: int
    failed_assets: list[UUID] = Field(default_factory=list)


class ScoreHistoryPointOut(ApiModel):
    score: DecimalStr
    criteria_version_id: UUID
    calculated_at: datetime


class ScoreTrendOut(ApiModel):
    start_score: DecimalStr
    end_score: DecimalStr
    change_percent: DecimalStr
    direction: TrendDirection
    data_points: int


class ScoreHistoryOut(ApiModel):
    asset_id: UUID
    days: int
    history: list[ScoreHistoryPointOut]
    trend: ScoreTrendOut | None = None


class RecommendationItemOut(ApiModel):
    asset_id: UUID
    symbol: str
    asset_class_id: UUID
    asset_class_name: str
    score: DecimalStr
    current_allocation: DecimalStr
    target_allocation: DecimalStr
    allocation_gap: DecimalStr
    recommended_amount: DecimalStr
    is_over_allocated: bool


class RecommendationOut(ApiModel):
    recommendation_id: UUID
    contribution: DecimalStr
    dividends: DecimalStr
    total_investable: DecimalStr
    base_currency: str
    items: list[RecommendationItemOut]
    status: RecommendationStatus
    is_balanced: bool
    generated_at: datetime
    expires_at: datetime


class InvestmentOut(ApiModel):
    investment_id: UUID
    asset_id: UUID
    symbol: str
    quantity: DecimalStr
    price_per_unit: DecimalStr
    total_amount: DecimalStr
    currency: str
    recommended_amount: DecimalStr | None = None
    invested_at: datetime


class ConfirmationOut(ApiModel):
    recommendation_id: UUID
    investments: list[InvestmentOut]
    total_invested: DecimalStr
    confirmed_at: datetime


class CriterionOut(ApiModel):
    criterion_id: UUID
    name: str
    metric_key: str
    operator: Operator
    threshold: DecimalStr | None = None
    threshold_max: DecimalStr | None = None
    points: int


class CriteriaVersionOut(ApiModel):
    version_id: UUID
    name: str
    target_market: str
    version: int
    criteria: list[CriterionOut]
    is_active: bool
    created_at: datetime


class CriteriaDifferenceOut(ApiModel):
    name: str
    change: CriterionChange
    criterion_a: CriterionOut | None = None
    criterion_b: CriterionOut | None = None


class AssetComparisonOut(ApiModel):
    asset_id: UUID
    symbol: str
    score_a: DecimalStr
    score_b: DecimalStr
    rank_a: int
    rank_b: int
    position_change: int
    difference_type: DifferenceType


class ComparisonSummaryOut(ApiModel):
    improved_count: int
    declined_count: int
    unchanged_count: int
    average_score_a: str
    average_score_b: str


class ComparisonOut(ApiModel):
    set_a_id: UUID
    set_a_name: str
    set_b_id: UUID
    set_b_name: str
    differences: list[CriteriaDifferenceOut]
    rankings: list[AssetComparisonOut]
    summary: ComparisonSummaryOut


class ConversionOut(ApiModel):
    value: DecimalStr
    from_currency: str
    to_currency: str
    rate: DecimalStr
    rate_date: datetime
    rate_source: str
    is_stale_rate: bool
    correlation_id: UUID


class ClassAllocationOut(ApiModel):
    class_id: UUID
    name: str
    value: DecimalStr
    current_percent: DecimalStr
    target_min: DecimalStr
    target_max: DecimalStr
    status: AllocationStatus
    asset_count: int


class AllocationWarningOut(ApiModel):
    code: str
    message: str
    total_minimum: DecimalStr | None = None


class AllocationSummaryOut(ApiModel):
    base_currency: str
    total_value: DecimalStr
    allocatable_value: DecimalStr
    ignored_value: DecimalStr
    unclassified_value: DecimalStr
    classes: list[ClassAllocationOut]
    warnings: list[AllocationWarningOut]
