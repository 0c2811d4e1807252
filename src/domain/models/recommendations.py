"""Recommendation domain models.

A Recommendation is ephemeral: it expires at expires_at and is recomputed
on demand rather than invalidated eagerly.  An empty items list is the
"balanced portfolio" outcome, not an error.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import RecommendationStatus
from .numeric import DecimalStr, add, sum_decimals
from .portfolio import Investment


class RecommendationItem(BaseModel):
    """Suggested contribution for one asset.

    current_allocation, target_allocation and allocation_gap are class-level
    percentages; allocation_gap is positive only for under-allocated classes.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    symbol: str
    asset_class_id: UUID
    asset_class_name: str
    score: DecimalStr
    current_allocation: DecimalStr
    target_allocation: DecimalStr
    allocation_gap: DecimalStr = Field(ge=0)
    recommended_amount: DecimalStr = Field(ge=0)
    is_over_allocated: bool = False


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommendation_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    portfolio_id: UUID
    contribution: DecimalStr = Field(ge=0)
    dividends: DecimalStr = Field(ge=0)
    total_investable: DecimalStr = Field(ge=0)
    base_currency: str
    items: list[RecommendationItem] = Field(default_factory=list)
    status: RecommendationStatus = RecommendationStatus.PENDING
    correlation_id: UUID | None = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime
    confirmed_at: datetime | None = None

    @model_validator(mode="after")
    def _total_is_contribution_plus_dividends(self) -> Recommendation:
        expected = add(self.contribution, self.dividends)
        if self.total_investable != expected:
            raise ValueError(
                f"total_investable ({self.total_investable}) must equal "
                f"contribution + dividends ({expected})"
            )
        return self

    @model_validator(mode="after")
    def _expiry_after_generation(self) -> Recommendation:
        if self.expires_at <= self.generated_at:
            raise ValueError("expires_at must be after generated_at")
        return self

    @property
    def is_confirmed(self) -> bool:
        return self.status is RecommendationStatus.CONFIRMED

    @property
    def is_balanced(self) -> bool:
        return not self.items

    @property
    def total_recommended(self) -> Decimal:
        return sum_decimals(i.recommended_amount for i in self.items)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def find_item(self, asset_id: UUID) -> RecommendationItem | None:
        for item in self.items:
            if item.asset_id == asset_id:
                return item
        return None


class InvestmentLine(BaseModel):
    """One line of a confirmation: what the user actually bought."""

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    actual_amount: DecimalStr
    price_per_unit: DecimalStr


class ConfirmationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommendation_id: UUID
    investments: list[Investment]
    total_invested: DecimalStr
    confirmed_at: datetime
