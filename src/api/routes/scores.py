"""Asset scoring routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_scoring_service, get_user_id
from src.api.schemas import (
    AssetScoreOut,
    CalculateScoresRequest,
    Envelope,
    ScoreHistoryOut,
    ScoreHistoryPointOut,
    ScoreRunOut,
    ScoreTrendOut,
)
from src.domain.services import ScoringService, calculate_trend

router = APIRouter(prefix="/scores", tags=["Scores"])


@router.post("/calculate")
async def calculate_scores(
    payload: CalculateScoresRequest,
    user_id: UUID = Depends(get_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> Envelope[ScoreRunOut]:
    run = await scoring.calculate_scores(
        user_id,
        [a.to_domain() for a in payload.assets],
        criteria_version_id=payload.criteria_version_id,
        target_market=payload.target_market,
    )
    return Envelope[ScoreRunOut](
        data=ScoreRunOut(
            scores=[AssetScoreOut.model_validate(s) for s in run.scores],
            correlation_id=run.correlation_id,
            calculated_at=run.calculated_at,
            duration=run.duration_ms,
            failed_assets=run.failed_assets,
        )
    )


@router.get("/{asset_id}/history")
async def score_history(
    asset_id: UUID,
    days: int = Query(30),
    include_trend: bool = Query(False, alias="includeTrend"),
    user_id: UUID = Depends(get_user_id),
    scoring: ScoringService = Depends(get_scoring_service),
) -> Envelope[ScoreHistoryOut]:
    history = await scoring.get_score_history(user_id, asset_id, days=days)
    trend = calculate_trend(history) if include_trend else None
    return Envelope[ScoreHistoryOut](
        data=ScoreHistoryOut(
            asset_id=asset_id,
            days=days,
            history=[ScoreHistoryPointOut.model_validate(h) for h in history],
            trend=ScoreTrendOut.model_validate(trend) if trend else None,
        )
    )
