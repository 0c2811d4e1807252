"""Criteria-set comparison service.

Scores the same asset sample under two criteria versions, without
persisting anything, and reports how scores and rankings move from set A
to set B.  Comparing a set with itself is rejected before any loading or
scoring happens.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from src.domain.errors import CriteriaNotFound, ValidationError
from src.domain.models.comparison import (
    AssetComparison,
    ComparisonResult,
    ComparisonSummary,
    CriteriaDifference,
)
from src.domain.models.criteria import CriteriaVersion, Criterion
from src.domain.models.enums import CriterionChange, DifferenceType
from src.domain.models.numeric import ZERO, divide, sum_decimals, to_fixed
from src.domain.models.scores import AssetScore, ScoringAsset
from src.domain.repositories.criteria import CriteriaRepository

from .scoring import ScoringService

logger = logging.getLogger(__name__)

MAX_SAMPLE_ASSETS = 20


def diff_criteria(a: CriteriaVersion, b: CriteriaVersion) -> list[CriteriaDifference]:
    """Pair criteria by case-insensitive name and classify each pair."""
    by_name_a = {c.name.lower(): c for c in a.criteria}
    by_name_b = {c.name.lower(): c for c in b.criteria}

    differences: list[CriteriaDifference] = []
    for key in sorted(by_name_a.keys() | by_name_b.keys()):
        ca = by_name_a.get(key)
        cb = by_name_b.get(key)
        if cb is None:
            change = CriterionChange.ONLY_A
        elif ca is None:
            change = CriterionChange.ONLY_B
        elif _same_rule(ca, cb):
            change = CriterionChange.IDENTICAL
        else:
            change = CriterionChange.MODIFIED
        differences.append(
            CriteriaDifference(
                name=(ca or cb).name,  # type: ignore[union-attr]
                change=change,
                criterion_a=ca,
                criterion_b=cb,
            )
        )
    return differences


def _same_rule(a: Criterion, b: Criterion) -> bool:
    return (
        a.metric_key == b.metric_key
        and a.operator == b.operator
        and a.threshold == b.threshold
        and a.threshold_max == b.threshold_max
        and a.points == b.points
    )


def _ranks(scores: dict[UUID, AssetScore]) -> dict[UUID, int]:
    ordered = sorted(scores.values(), key=lambda s: (-s.score, s.symbol))
    return {s.asset_id: position for position, s in enumerate(ordered, start=1)}


def _average(values: list[Decimal]) -> str:
    if not values:
        return to_fixed(ZERO, 2)
    return to_fixed(divide(sum_decimals(values), len(values)), 2)


class ComparisonService:
    def __init__(
        self,
        criteria: CriteriaRepository,
        scoring: ScoringService,
        sample_size: int = MAX_SAMPLE_ASSETS,
    ) -> None:
        self._criteria = criteria
        self._scoring = scoring
        self._sample_size = sample_size

    async def compare(
        self,
        user_id: UUID,
        set_a_id: UUID,
        set_b_id: UUID,
        assets: list[ScoringAsset],
    ) -> ComparisonResult:
        if set_a_id == set_b_id:
            raise ValidationError(
                "Cannot compare a criteria set with itself",
                details={"setAId": str(set_a_id), "setBId": str(set_b_id)},
            )

        version_a = await self._load(user_id, set_a_id)
        version_b = await self._load(user_id, set_b_id)

        sample = assets[: self._sample_size]
        scored_a = self._scoring.score_preview(user_id, version_a, sample)
        scored_b = self._scoring.score_preview(user_id, version_b, sample)

        scores_a = {s.asset_id: s for s in scored_a}
        scores_b = {s.asset_id: s for s in scored_b}
        common = {k: v for k, v in scores_a.items() if k in scores_b}
        ranks_a = _ranks(common)
        ranks_b = _ranks({k: scores_b[k] for k in common})

        rankings: list[AssetComparison] = []
        for asset_id, score_a in common.items():
            score_b = scores_b[asset_id]
            if score_b.score > score_a.score:
                difference = DifferenceType.IMPROVED
            elif score_b.score < score_a.score:
                difference = DifferenceType.DECLINED
            else:
                difference = DifferenceType.IDENTICAL
            rankings.append(
                AssetComparison(
                    asset_id=asset_id,
                    symbol=score_a.symbol,
                    score_a=score_a.score,
                    score_b=score_b.score,
                    rank_a=ranks_a[asset_id],
                    rank_b=ranks_b[asset_id],
                    position_change=ranks_a[asset_id] - ranks_b[asset_id],
                    difference_type=difference,
                )
            )
        rankings.sort(key=lambda r: r.rank_b)

        summary = ComparisonSummary(
            improved_count=sum(1 for r in rankings if r.difference_type is DifferenceType.IMPROVED),
            declined_count=sum(1 for r in rankings if r.difference_type is DifferenceType.DECLINED),
            unchanged_count=sum(1 for r in rankings if r.difference_type is DifferenceType.IDENTICAL),
            average_score_a=_average([r.score_a for r in rankings]),
            average_score_b=_average([r.score_b for r in rankings]),
        )
        logger.info(
            "Compared criteria sets %s and %s over %d assets",
            set_a_id,
            set_b_id,
            len(rankings),
        )
        return ComparisonResult(
            set_a_id=version_a.version_id,
            set_a_name=version_a.name,
            set_b_id=version_b.version_id,
            set_b_name=version_b.name,
            differences=diff_criteria(version_a, version_b),
            rankings=rankings,
            summary=summary,
        )

    async def _load(self, user_id: UUID, version_id: UUID) -> CriteriaVersion:
        version = await self._criteria.get_by_id(version_id)
        if version is None or version.user_id != user_id:
            raise CriteriaNotFound(details={"criteriaVersionId": str(version_id)})
        return version
