"""Criteria-set comparison models."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .criteria import Criterion
from .enums import CriterionChange, DifferenceType
from .numeric import DecimalStr


class CriteriaDifference(BaseModel):
    """How one criterion (matched by case-insensitive name) differs between sets."""

    model_config = ConfigDict(frozen=True)

    name: str
    change: CriterionChange
    criterion_a: Criterion | None = None
    criterion_b: Criterion | None = None


class AssetComparison(BaseModel):
    """Score and rank of one asset under set A and set B.

    Ranks are 1-based.  position_change = rank_a - rank_b, so a positive
    value means the asset moved up the ranking under set B.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    symbol: str
    score_a: DecimalStr
    score_b: DecimalStr
    rank_a: int = Field(ge=1)
    rank_b: int = Field(ge=1)
    position_change: int
    difference_type: DifferenceType


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    improved_count: int = 0
    declined_count: int = 0
    unchanged_count: int = 0
    average_score_a: str = "0.00"
    average_score_b: str = "0.00"


class ComparisonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    set_a_id: UUID
    set_a_name: str
    set_b_id: UUID
    set_b_name: str
    differences: list[CriteriaDifference] = Field(default_factory=list)
    rankings: list[AssetComparison] = Field(default_factory=list)
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)
