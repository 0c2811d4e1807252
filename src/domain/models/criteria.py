"""Scoring criteria domain models.

A CriteriaVersion is an immutable, versioned list of scoring rules owned by
one user for one target market.  Editing a set never mutates an existing
version: next_version() produces a fresh version (fresh criterion ids) and
the caller deactivates the old one.  Deletion is a soft delete
(is_active=False) because score history references versions with an
ON DELETE RESTRICT foreign key.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import Operator
from .numeric import DecimalStr

MIN_POINTS = -100
MAX_POINTS = 100


class Criterion(BaseModel):
    """One scoring rule: compare fundamentals[metric_key] against a threshold.

    threshold      required for every operator except EXISTS
    threshold_max  upper bound; required for RANGE and forbidden otherwise
    points         integer in [-100, 100], awarded when the rule matches
    """

    model_config = ConfigDict(frozen=True)

    criterion_id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, max_length=100)
    metric_key: str = Field(min_length=1)
    operator: Operator
    threshold: DecimalStr | None = None
    threshold_max: DecimalStr | None = None
    points: int = Field(ge=MIN_POINTS, le=MAX_POINTS)

    @model_validator(mode="after")
    def _thresholds_match_operator(self) -> Criterion:
        if self.operator.needs_threshold and self.threshold is None:
            raise ValueError(f"operator {self.operator.value!r} requires a threshold")
        if self.operator is Operator.RANGE:
            if self.threshold_max is None:
                raise ValueError("operator 'range' requires threshold_max")
            if self.threshold > self.threshold_max:  # type: ignore[operator]
                raise ValueError(
                    f"range threshold ({self.threshold}) must not exceed "
                    f"threshold_max ({self.threshold_max})"
                )
        elif self.threshold_max is not None:
            raise ValueError(
                f"threshold_max is only valid for 'range', not {self.operator.value!r}"
            )
        return self

    def renewed(self) -> Criterion:
        """Same rule under a new id, for inclusion in another version."""
        return self.model_copy(update={"criterion_id": uuid4()})


class CriteriaVersion(BaseModel):
    """A versioned, user-owned criteria set for one target market."""

    model_config = ConfigDict(frozen=True)

    version_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str = Field(min_length=1, max_length=100)
    target_market: str = Field(min_length=1)
    version: int = Field(default=1, ge=1)
    criteria: list[Criterion] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        user_id: UUID,
        name: str,
        target_market: str,
        criteria: list[Criterion],
    ) -> CriteriaVersion:
        return cls(
            user_id=user_id,
            name=name,
            target_market=target_market,
            criteria=[c.renewed() for c in criteria],
        )

    def next_version(
        self,
        criteria: list[Criterion] | None = None,
        name: str | None = None,
        target_market: str | None = None,
    ) -> CriteriaVersion:
        """Build the successor version; self is left untouched."""
        source = criteria if criteria is not None else self.criteria
        return CriteriaVersion(
            user_id=self.user_id,
            name=name or self.name,
            target_market=target_market or self.target_market,
            version=self.version + 1,
            criteria=[c.renewed() for c in source],
        )

    def copy_as(self, name: str | None = None, target_market: str | None = None) -> CriteriaVersion:
        """Independent copy starting again at version 1."""
        return CriteriaVersion.create(
            user_id=self.user_id,
            name=name or f"{self.name} (Copy)",
            target_market=target_market or self.target_market,
            criteria=self.criteria,
        )

    def deactivated(self) -> CriteriaVersion:
        return self.model_copy(update={"is_active": False})

    @property
    def max_score(self) -> int:
        """Sum of positive points: the upper bound any asset can reach."""
        return sum(c.points for c in self.criteria if c.points > 0)
