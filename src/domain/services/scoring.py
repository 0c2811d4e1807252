"""Asset scoring service.

Pipeline for calculate_scores:
    resolve_criteria          (explicit version, else newest active for market)
    → score_assets            (evaluate every criterion for every asset)
        → _score_one          (sum matched points, clamp at 0)
    → _persist                (upsert current score, append history row)

All assets of one call share a correlation id, which also keys the audit
events CALC_STARTED → INPUTS_CAPTURED → SCORES_COMPUTED → CALC_COMPLETED.

Failure isolation is per asset: an unexpected error while scoring or
saving one asset is logged, the asset is reported in failed_assets, and the
rest of the batch continues.  A failed history append is logged and does
not affect the returned score.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from src.domain.errors import CriteriaNotFound, DomainError, NoCriteriaFound, ValidationError
from src.domain.models.audit import CalculationEvent
from src.domain.models.criteria import CriteriaVersion
from src.domain.models.enums import CalculationEventType, TrendDirection
from src.domain.models.numeric import (
    HUNDRED,
    ZERO,
    divide,
    max_decimal,
    multiply,
    quantize,
    subtract,
    to_plain,
)
from src.domain.models.scores import (
    AssetScore,
    ScoreHistoryEntry,
    ScoreTrend,
    ScoringAsset,
    ScoringRun,
)
from src.domain.repositories.audit import AuditLog
from src.domain.repositories.criteria import CriteriaRepository
from src.domain.repositories.scores import ScoreRepository

from .evaluator import CriteriaEvaluator

logger = logging.getLogger(__name__)

HISTORY_WINDOWS = (30, 60, 90)
_DEFAULT_FRESH_FOR = timedelta(hours=24)


class ScoringService:
    """Scores assets against a user's criteria set and keeps score history."""

    def __init__(
        self,
        criteria: CriteriaRepository,
        scores: ScoreRepository,
        audit: AuditLog,
        evaluator: CriteriaEvaluator | None = None,
        fresh_for: timedelta = _DEFAULT_FRESH_FOR,
    ) -> None:
        self._criteria = criteria
        self._scores = scores
        self._audit = audit
        self._evaluator = evaluator or CriteriaEvaluator()
        self._fresh_for = fresh_for

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    async def calculate_scores(
        self,
        user_id: UUID,
        assets: list[ScoringAsset],
        criteria_version_id: UUID | None = None,
        target_market: str | None = None,
    ) -> ScoringRun:
        started = time.perf_counter()
        correlation_id = uuid4()
        calculated_at = datetime.now(timezone.utc)

        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.CALC_STARTED,
            {"assetCount": len(assets), "targetMarket": target_market},
        )
        try:
            version = await self.resolve_criteria(user_id, criteria_version_id, target_market)
        except DomainError as exc:
            await self._event(
                correlation_id,
                user_id,
                CalculationEventType.CALC_FAILED,
                {"code": exc.code, "message": exc.message},
            )
            raise

        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.INPUTS_CAPTURED,
            {
                "criteriaVersionId": str(version.version_id),
                "criteria": [c.model_dump(mode="json") for c in version.criteria],
                "fundamentals": {a.symbol: _metrics_payload(a) for a in assets},
            },
        )

        scores, failed = self.score_assets(
            version, assets, user_id, correlation_id=correlation_id, now=calculated_at
        )
        persisted: list[AssetScore] = []
        for score in scores:
            if await self._persist(score):
                persisted.append(score)
            else:
                failed.append(score.asset_id)

        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.SCORES_COMPUTED,
            {
                "scores": [
                    {"assetId": str(s.asset_id), "symbol": s.symbol, "score": to_plain(s.score)}
                    for s in persisted
                ]
            },
        )

        duration_ms = int((time.perf_counter() - started) * 1000)
        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.CALC_COMPLETED,
            {
                "durationMs": duration_ms,
                "assetCount": len(persisted),
                "failedAssets": [str(a) for a in failed],
            },
        )
        logger.info(
            "Scores calculated for %d assets (%d failed) in %d ms",
            len(persisted),
            len(failed),
            duration_ms,
            extra={"correlation_id": str(correlation_id)},
        )
        return ScoringRun(
            scores=persisted,
            correlation_id=correlation_id,
            criteria_version_id=version.version_id,
            calculated_at=calculated_at,
            duration_ms=duration_ms,
            failed_assets=failed,
        )

    async def resolve_criteria(
        self,
        user_id: UUID,
        criteria_version_id: UUID | None = None,
        target_market: str | None = None,
    ) -> CriteriaVersion:
        """Return the criteria version a calculation should use.

        An explicit id must name an active version owned by the user.
        Otherwise the newest active version (for target_market, if given)
        is used.
        """
        if criteria_version_id is not None:
            version = await self._criteria.get_by_id(criteria_version_id)
            if version is None or version.user_id != user_id or not version.is_active:
                raise CriteriaNotFound(details={"criteriaVersionId": str(criteria_version_id)})
            return version

        version = await self._criteria.get_active(user_id, target_market=target_market)
        if version is None:
            raise NoCriteriaFound(details={"targetMarket": target_market} if target_market else None)
        return version

    def score_assets(
        self,
        version: CriteriaVersion,
        assets: list[ScoringAsset],
        user_id: UUID,
        correlation_id: UUID | None = None,
        now: datetime | None = None,
    ) -> tuple[list[AssetScore], list[UUID]]:
        """Score assets without persisting anything.

        Returns (scores, failed_asset_ids).
        """
        now = now or datetime.now(timezone.utc)
        scores: list[AssetScore] = []
        failed: list[UUID] = []
        for asset in assets:
            try:
                scores.append(self._score_one(version, asset, user_id, correlation_id, now))
            except Exception:
                logger.exception(
                    "Scoring failed for asset %s; continuing with remaining assets",
                    asset.symbol,
                    extra={"correlation_id": str(correlation_id) if correlation_id else None},
                )
                failed.append(asset.asset_id)
        return scores, failed

    def score_preview(
        self,
        user_id: UUID,
        version: CriteriaVersion,
        assets: list[ScoringAsset],
    ) -> list[AssetScore]:
        """Score assets under any version the caller already holds; nothing is saved."""
        scores, _ = self.score_assets(version, assets, user_id)
        return scores

    async def get_score(self, user_id: UUID, asset_id: UUID) -> AssetScore | None:
        return await self._scores.get_current(user_id, asset_id)

    async def get_score_history(
        self,
        user_id: UUID,
        asset_id: UUID,
        days: int = 30,
        now: datetime | None = None,
    ) -> list[ScoreHistoryEntry]:
        """History rows of the last ``days`` days in chronological order."""
        if days not in HISTORY_WINDOWS:
            raise ValidationError(
                f"days must be one of {', '.join(str(d) for d in HISTORY_WINDOWS)}",
                details={"days": days},
            )
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        history = await self._scores.list_history(user_id, asset_id, since=since)
        return sorted(history, key=lambda h: h.calculated_at)

    async def get_score_at_date(
        self, user_id: UUID, asset_id: UUID, at: datetime
    ) -> ScoreHistoryEntry | None:
        return await self._scores.get_history_at(user_id, asset_id, at)

    def is_fresh(self, score: AssetScore, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - score.calculated_at <= self._fresh_for

    # ------------------------------------------------------------------ #
    # Internals                                                           #
    # ------------------------------------------------------------------ #

    def _score_one(
        self,
        version: CriteriaVersion,
        asset: ScoringAsset,
        user_id: UUID,
        correlation_id: UUID | None,
        now: datetime,
    ) -> AssetScore:
        breakdown = self._evaluator.evaluate_all(version.criteria, asset.fundamentals, now)
        raw = sum(r.points_awarded for r in breakdown if r.matched)
        return AssetScore(
            user_id=user_id,
            asset_id=asset.asset_id,
            symbol=asset.symbol,
            criteria_version_id=version.version_id,
            score=max_decimal(raw, ZERO),
            breakdown=breakdown,
            correlation_id=correlation_id,
            calculated_at=now,
        )

    async def _persist(self, score: AssetScore) -> bool:
        try:
            await self._scores.save(score)
        except Exception:
            logger.exception(
                "Saving score failed for asset %s",
                score.symbol,
                extra={"correlation_id": str(score.correlation_id)},
            )
            return False
        try:
            await self._scores.append_history(score.to_history())
        except Exception as exc:
            logger.warning(
                "Appending score history failed for asset %s: %s",
                score.symbol,
                exc,
                extra={"correlation_id": str(score.correlation_id)},
            )
        return True

    async def _event(
        self,
        correlation_id: UUID,
        user_id: UUID,
        event_type: CalculationEventType,
        payload: dict,
    ) -> None:
        await self._audit.record(
            CalculationEvent(
                correlation_id=correlation_id,
                user_id=user_id,
                event_type=event_type,
                payload=payload,
            )
        )


def _metrics_payload(asset: ScoringAsset) -> dict[str, str | None]:
    return {k: None if v is None else str(v) for k, v in asset.fundamentals.metrics.items()}


def calculate_trend(history: list[ScoreHistoryEntry]) -> ScoreTrend | None:
    """Compare the first and last points of a score history.

    Returns None when fewer than two points exist.  A start score of zero
    yields direction=stable and change_percent 0.
    """
    if len(history) < 2:
        return None

    ordered = sorted(history, key=lambda h: h.calculated_at)
    start = ordered[0].score
    end = ordered[-1].score

    if start == ZERO:
        return ScoreTrend(
            start_score=start,
            end_score=end,
            change_percent=ZERO,
            direction=TrendDirection.STABLE,
            data_points=len(ordered),
        )

    change = quantize(multiply(divide(subtract(end, start), start), HUNDRED), 2)
    if end > start:
        direction = TrendDirection.UP
    elif end < start:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.STABLE

    return ScoreTrend(
        start_score=start,
        end_score=end,
        change_percent=change,
        direction=direction,
        data_points=len(ordered),
    )
