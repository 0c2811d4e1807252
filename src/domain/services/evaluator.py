"""Criteria evaluator.

Decides whether one asset's fundamentals satisfy one criterion.  Every call
returns a CriterionResult; nothing raised while evaluating a single
criterion escapes.  Missing, stale, unparseable and failed evaluations come
back as the skipped variant so one bad metric never aborts a scoring run.

Operators:
    gte / lte / gt / lt   compare against ``threshold``
    eq                    exact decimal equality with ``threshold``
    range                 threshold <= value <= threshold_max (inclusive)
    exists                matched whenever the metric has a usable value
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

from src.domain.errors import InvalidDecimal
from src.domain.models.criteria import Criterion
from src.domain.models.enums import Operator, SkippedReason
from src.domain.models.numeric import to_decimal, to_plain
from src.domain.models.scores import CriterionResult, Fundamentals

logger = logging.getLogger(__name__)

_COMPARATORS: dict[Operator, Callable[[Decimal, Criterion], bool]] = {
    Operator.GTE: lambda v, c: v >= c.threshold,
    Operator.LTE: lambda v, c: v <= c.threshold,
    Operator.GT: lambda v, c: v > c.threshold,
    Operator.LT: lambda v, c: v < c.threshold,
    Operator.EQ: lambda v, c: v == c.threshold,
    Operator.RANGE: lambda v, c: c.threshold <= v <= c.threshold_max,
    Operator.EXISTS: lambda v, c: True,
}


class CriteriaEvaluator:
    """Evaluates criteria against a fundamentals snapshot.

    stale_after: when set, a snapshot whose fetched_at is older than this
                  window skips every criterion with data_stale.  When None
                  freshness is not checked.
    """

    def __init__(self, stale_after: timedelta | None = None) -> None:
        self._stale_after = stale_after

    def evaluate(
        self,
        criterion: Criterion,
        fundamentals: Fundamentals,
        now: datetime | None = None,
    ) -> CriterionResult:
        try:
            return self._evaluate(criterion, fundamentals, now)
        except Exception as exc:
            logger.warning(
                "Criterion evaluation failed; skipping criterion %s (%s): %s",
                criterion.name,
                criterion.metric_key,
                exc,
            )
            return CriterionResult.skipped(
                criterion.criterion_id, criterion.name, SkippedReason.EVALUATION_ERROR
            )

    def evaluate_all(
        self,
        criteria: list[Criterion],
        fundamentals: Fundamentals,
        now: datetime | None = None,
    ) -> list[CriterionResult]:
        return [self.evaluate(c, fundamentals, now) for c in criteria]

    # ------------------------------------------------------------------ #
    # Internals                                                           #
    # ------------------------------------------------------------------ #

    def _evaluate(
        self,
        criterion: Criterion,
        fundamentals: Fundamentals,
        now: datetime | None,
    ) -> CriterionResult:
        raw = fundamentals.metrics.get(criterion.metric_key)
        if raw is None:
            return CriterionResult.skipped(
                criterion.criterion_id, criterion.name, SkippedReason.MISSING_FUNDAMENTAL
            )

        if self._is_stale(fundamentals, now):
            return CriterionResult.skipped(
                criterion.criterion_id, criterion.name, SkippedReason.DATA_STALE
            )

        try:
            value = to_decimal(raw)
        except InvalidDecimal:
            return CriterionResult.skipped(
                criterion.criterion_id,
                criterion.name,
                SkippedReason.INVALID_VALUE,
                actual_value=str(raw),
            )

        matched = _COMPARATORS[criterion.operator](value, criterion)
        return CriterionResult.evaluated(
            criterion.criterion_id,
            criterion.name,
            matched=matched,
            points=criterion.points,
            actual_value=to_plain(value),
        )

    def _is_stale(self, fundamentals: Fundamentals, now: datetime | None) -> bool:
        if self._stale_after is None or fundamentals.fetched_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now - fundamentals.fetched_at > self._stale_after
