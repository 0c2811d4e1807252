"""Allocation summary and target-range validation.

Holdings are valued in the portfolio's base currency.  Ignored holdings
count toward total_value but not toward allocatable_value, so they never
move an allocation percentage.  Unclassified holdings are part of
allocatable_value (they dilute every class) but belong to no class.

Target-range validation never rejects: a sum of target_min above 100 is a
MINIMUM_SUM_EXCEEDS_100 warning the UI shows next to the ranges.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from src.domain.errors import LimitExceededError, PortfolioNotFound
from src.domain.models.allocation import (
    MINIMUM_SUM_EXCEEDS_100,
    AllocationSummary,
    AllocationWarning,
    ClassAllocation,
)
from src.domain.models.enums import AllocationStatus
from src.domain.models.numeric import HUNDRED, ZERO, percent_of, quantize, sum_decimals, to_plain
from src.domain.models.portfolio import MAX_ASSET_CLASSES_PER_USER, AssetClass, Portfolio
from src.domain.repositories.portfolios import AssetClassRepository, PortfolioRepository

from .currency import CurrencyConverter

logger = logging.getLogger(__name__)

PERCENT_PLACES = 4


def validate_allocation_ranges(classes: list[AssetClass]) -> list[AllocationWarning]:
    total_min = sum_decimals(c.target_min for c in classes)
    if total_min > HUNDRED:
        return [
            AllocationWarning(
                code=MINIMUM_SUM_EXCEEDS_100,
                message=(
                    f"Minimum allocations sum to {to_plain(total_min)}%, which exceeds 100%. "
                    "Not every class can reach its minimum."
                ),
                total_minimum=total_min,
            )
        ]
    return []


async def holding_values(portfolio: Portfolio, converter: CurrencyConverter) -> dict[UUID, Decimal]:
    """Market value of every holding in the portfolio's base currency."""
    values: dict[UUID, Decimal] = {}
    for asset in portfolio.assets:
        if asset.currency.upper() == portfolio.base_currency.upper():
            values[asset.asset_id] = asset.value
        else:
            result = await converter.convert(asset.value, asset.currency, portfolio.base_currency)
            values[asset.asset_id] = result.value
    return values


def classify(current: Decimal, asset_class: AssetClass) -> AllocationStatus:
    if current < asset_class.target_min:
        return AllocationStatus.UNDER
    if current > asset_class.target_max:
        return AllocationStatus.OVER
    return AllocationStatus.ON_TARGET


def summarize_allocation(
    portfolio: Portfolio,
    classes: list[AssetClass],
    values: dict[UUID, Decimal],
) -> AllocationSummary:
    """Pure computation of the allocation summary from pre-converted values."""
    total = sum_decimals(values.get(a.asset_id, ZERO) for a in portfolio.assets)
    ignored = sum_decimals(values.get(a.asset_id, ZERO) for a in portfolio.assets if a.is_ignored)
    active = portfolio.active_assets
    allocatable = sum_decimals(values.get(a.asset_id, ZERO) for a in active)

    known = {c.class_id for c in classes}
    unclassified = sum_decimals(
        values.get(a.asset_id, ZERO) for a in active if a.asset_class_id not in known
    )

    rows: list[ClassAllocation] = []
    for asset_class in classes:
        members = [a for a in active if a.asset_class_id == asset_class.class_id]
        class_value = sum_decimals(values.get(a.asset_id, ZERO) for a in members)
        current = quantize(percent_of(class_value, allocatable), PERCENT_PLACES)
        rows.append(
            ClassAllocation(
                class_id=asset_class.class_id,
                name=asset_class.name,
                value=class_value,
                current_percent=current,
                target_min=asset_class.target_min,
                target_max=asset_class.target_max,
                status=classify(current, asset_class),
                asset_count=len(members),
            )
        )

    return AllocationSummary(
        base_currency=portfolio.base_currency,
        total_value=total,
        allocatable_value=allocatable,
        ignored_value=ignored,
        unclassified_value=unclassified,
        classes=rows,
        warnings=validate_allocation_ranges(classes),
    )


class AllocationService:
    def __init__(
        self,
        portfolios: PortfolioRepository,
        asset_classes: AssetClassRepository,
        converter: CurrencyConverter,
    ) -> None:
        self._portfolios = portfolios
        self._asset_classes = asset_classes
        self._converter = converter

    async def get_summary(self, user_id: UUID) -> AllocationSummary:
        portfolio = await self._portfolios.get_for_user(user_id)
        if portfolio is None:
            raise PortfolioNotFound(details={"userId": str(user_id)})
        classes = await self._asset_classes.list_for_user(user_id)
        values = await holding_values(portfolio, self._converter)
        return summarize_allocation(portfolio, classes, values)

    async def add_asset_class(
        self, asset_class: AssetClass
    ) -> tuple[AssetClass, list[AllocationWarning]]:
        """Create an asset class; returns it with any range warnings."""
        count = await self._asset_classes.count_for_user(asset_class.user_id)
        if count >= MAX_ASSET_CLASSES_PER_USER:
            raise LimitExceededError(
                f"Maximum of {MAX_ASSET_CLASSES_PER_USER} asset classes reached",
                details={"limit": MAX_ASSET_CLASSES_PER_USER, "current": count},
            )
        created = await self._asset_classes.create(asset_class)
        existing = await self._asset_classes.list_for_user(asset_class.user_id)
        if all(c.class_id != created.class_id for c in existing):
            existing = [*existing, created]
        warnings = validate_allocation_ranges(existing)
        for w in warnings:
            logger.warning("Allocation warning for user %s: %s", asset_class.user_id, w.message)
        return created, warnings
