"""Contribution recommendation and investment confirmation routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from src.api.dependencies import get_recommendation_service, get_user_id
from src.api.schemas import (
    ConfirmationOut,
    ConfirmInvestmentsRequest,
    Envelope,
    GenerateRecommendationRequest,
    RecommendationOut,
)
from src.domain.errors import RecommendationNotFound
from src.domain.services import RecommendationService

router = APIRouter(tags=["Recommendations"])


@router.get("/recommendations")
async def get_recommendation(
    user_id: UUID = Depends(get_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> Envelope[RecommendationOut]:
    """Current recommendation; 404 once it has expired or been confirmed."""
    recommendation = await service.get_cached(user_id)
    if recommendation is None:
        raise RecommendationNotFound("No active recommendation; generate a new one")
    return Envelope[RecommendationOut](data=RecommendationOut.model_validate(recommendation))


@router.post("/recommendations/generate")
async def generate_recommendation(
    payload: GenerateRecommendationRequest,
    user_id: UUID = Depends(get_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> Envelope[RecommendationOut]:
    recommendation = await service.generate(
        user_id, contribution=payload.contribution, dividends=payload.dividends
    )
    return Envelope[RecommendationOut](data=RecommendationOut.model_validate(recommendation))


@router.post("/investments/confirm")
async def confirm_investments(
    payload: ConfirmInvestmentsRequest,
    user_id: UUID = Depends(get_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> Envelope[ConfirmationOut]:
    result = await service.confirm(
        user_id,
        payload.recommendation_id,
        [line.to_domain() for line in payload.investments],
    )
    return Envelope[ConfirmationOut](data=ConfirmationOut.model_validate(result))
