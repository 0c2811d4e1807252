"""Portfolio, asset class and investment domain models.

is_ignored assets count toward a portfolio's total value but are excluded
from allocation percentages and from recommendations.  Target ranges are
percentages in [0, 100]; the sum of target_min across classes may exceed
100, which is reported as a warning by the allocation service rather than
rejected here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .numeric import DecimalStr, multiply

MAX_ASSET_CLASSES_PER_USER = 10


class AssetClass(BaseModel):
    """A user-defined allocation bucket with a target percentage range.

    max_assets           cap on recommended assets within the class
    min_allocation_value smallest amount worth recommending for the class
                         in one contribution; smaller shares are pooled
                         and redistributed.
    """

    model_config = ConfigDict(frozen=True)

    class_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str = Field(min_length=1, max_length=50)
    target_min: DecimalStr = Field(ge=0, le=100)
    target_max: DecimalStr = Field(ge=0, le=100)
    max_assets: int | None = Field(default=None, ge=1)
    min_allocation_value: DecimalStr | None = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _min_not_above_max(self) -> AssetClass:
        if self.target_min > self.target_max:
            raise ValueError(
                f"target_min ({self.target_min}) must not exceed target_max ({self.target_max})"
            )
        return self


class PortfolioAsset(BaseModel):
    """A holding inside a portfolio.

    current_price is refreshed by the external price job; until then the
    holding is valued at purchase_price.  Prices are in ``currency``.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID = Field(default_factory=uuid4)
    portfolio_id: UUID
    symbol: str = Field(min_length=1, max_length=20)
    quantity: DecimalStr = Field(ge=0)
    purchase_price: DecimalStr = Field(ge=0)
    current_price: DecimalStr | None = Field(default=None, ge=0)
    currency: str = "USD"
    asset_class_id: UUID | None = None
    subclass_id: UUID | None = None
    is_ignored: bool = False

    @property
    def price(self) -> Decimal:
        return self.current_price if self.current_price is not None else self.purchase_price

    @property
    def value(self) -> Decimal:
        """Market value in the asset's own currency."""
        return multiply(self.quantity, self.price)


class Portfolio(BaseModel):
    model_config = ConfigDict(frozen=True)

    portfolio_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str = Field(min_length=1, max_length=50)
    base_currency: str = "USD"
    assets: list[PortfolioAsset] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def active_assets(self) -> list[PortfolioAsset]:
        return [a for a in self.assets if not a.is_ignored]

    def find_asset(self, asset_id: UUID) -> PortfolioAsset | None:
        for a in self.assets:
            if a.asset_id == asset_id:
                return a
        return None


class Investment(BaseModel):
    """An executed purchase recorded when a recommendation is confirmed."""

    model_config = ConfigDict(frozen=True)

    investment_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    portfolio_id: UUID
    asset_id: UUID
    symbol: str
    quantity: DecimalStr = Field(gt=0)
    price_per_unit: DecimalStr = Field(gt=0)
    total_amount: DecimalStr = Field(gt=0)
    currency: str
    recommendation_id: UUID | None = None
    recommended_amount: DecimalStr | None = None
    invested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
