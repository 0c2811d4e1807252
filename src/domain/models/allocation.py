"""Allocation summary and validation-warning models."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .enums import AllocationStatus
from .numeric import DecimalStr

MINIMUM_SUM_EXCEEDS_100 = "MINIMUM_SUM_EXCEEDS_100"


class AllocationWarning(BaseModel):
    """Non-blocking finding about a user's target ranges."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    total_minimum: DecimalStr | None = None


class ClassAllocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    class_id: UUID
    name: str
    value: DecimalStr
    current_percent: DecimalStr
    target_min: DecimalStr
    target_max: DecimalStr
    status: AllocationStatus
    asset_count: int = Field(ge=0)


class AllocationSummary(BaseModel):
    """Current allocation of a portfolio in its base currency.

    total_value includes ignored holdings; percentages are relative to
    allocatable_value, which excludes them.
    """

    model_config = ConfigDict(frozen=True)

    base_currency: str
    total_value: DecimalStr
    allocatable_value: DecimalStr
    ignored_value: DecimalStr
    unclassified_value: DecimalStr
    classes: list[ClassAllocation] = Field(default_factory=list)
    warnings: list[AllocationWarning] = Field(default_factory=list)
