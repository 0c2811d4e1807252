"""Asset scoring domain models.

CriterionResult is a tagged result: every evaluation returns one, and the
skipped variant (skipped_reason set) always carries matched=False and
points_awarded=0.  AssetScore is the current score per (user, asset);
ScoreHistoryEntry rows are append-only and back the trend queries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import SkippedReason, TrendDirection
from .numeric import DecimalStr


class Fundamentals(BaseModel):
    """Snapshot of external metrics for one asset.

    metrics values are decimal strings, ints or Decimals; None marks a metric
    the provider knows about but has no value for.  Values are not parsed
    here: the evaluator decides whether a value is usable.
    """

    model_config = ConfigDict(frozen=True)

    metrics: dict[str, Any] = Field(default_factory=dict)
    source: str | None = None
    fetched_at: datetime | None = None


class ScoringAsset(BaseModel):
    """An asset presented to the scoring engine together with its fundamentals."""

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    symbol: str
    fundamentals: Fundamentals = Field(default_factory=Fundamentals)


class CriterionResult(BaseModel):
    """Outcome of evaluating one criterion against one asset's fundamentals."""

    model_config = ConfigDict(frozen=True)

    criterion_id: UUID
    criterion_name: str
    matched: bool
    points_awarded: int
    actual_value: str | None = None
    skipped_reason: SkippedReason | None = None

    @model_validator(mode="after")
    def _skipped_awards_nothing(self) -> CriterionResult:
        if self.skipped_reason is not None and (self.matched or self.points_awarded != 0):
            raise ValueError("a skipped criterion must have matched=False and points_awarded=0")
        if not self.matched and self.points_awarded != 0:
            raise ValueError("an unmatched criterion must award 0 points")
        return self

    @classmethod
    def evaluated(
        cls,
        criterion_id: UUID,
        criterion_name: str,
        matched: bool,
        points: int,
        actual_value: str,
    ) -> CriterionResult:
        return cls(
            criterion_id=criterion_id,
            criterion_name=criterion_name,
            matched=matched,
            points_awarded=points if matched else 0,
            actual_value=actual_value,
        )

    @classmethod
    def skipped(
        cls,
        criterion_id: UUID,
        criterion_name: str,
        reason: SkippedReason,
        actual_value: str | None = None,
    ) -> CriterionResult:
        return cls(
            criterion_id=criterion_id,
            criterion_name=criterion_name,
            matched=False,
            points_awarded=0,
            actual_value=actual_value,
            skipped_reason=reason,
        )

    @property
    def is_skipped(self) -> bool:
        return self.skipped_reason is not None


class AssetScore(BaseModel):
    """Current score of one asset for one user under one criteria version."""

    model_config = ConfigDict(frozen=True)

    score_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    asset_id: UUID
    symbol: str
    criteria_version_id: UUID
    score: DecimalStr = Field(ge=0)
    breakdown: list[CriterionResult] = Field(default_factory=list)
    correlation_id: UUID | None = None
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_history(self) -> ScoreHistoryEntry:
        return ScoreHistoryEntry(
            user_id=self.user_id,
            asset_id=self.asset_id,
            symbol=self.symbol,
            criteria_version_id=self.criteria_version_id,
            score=self.score,
            calculated_at=self.calculated_at,
        )


class ScoreHistoryEntry(BaseModel):
    """Append-only record of a score at a point in time."""

    model_config = ConfigDict(frozen=True)

    history_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    asset_id: UUID
    symbol: str
    criteria_version_id: UUID
    score: DecimalStr = Field(ge=0)
    calculated_at: datetime


class ScoreTrend(BaseModel):
    """Movement between the first and last history points."""

    model_config = ConfigDict(frozen=True)

    start_score: DecimalStr
    end_score: DecimalStr
    change_percent: DecimalStr
    direction: TrendDirection
    data_points: int = Field(ge=2)


class ScoringRun(BaseModel):
    """Result of one calculate_scores batch.

    failed_assets lists assets isolated after an unexpected error; their
    scores are absent from ``scores``.
    """

    scores: list[AssetScore]
    correlation_id: UUID
    criteria_version_id: UUID
    calculated_at: datetime
    duration_ms: int
    failed_assets: list[UUID] = Field(default_factory=list)

    @property
    def asset_count(self) -> int:
        return len(self.scores)
