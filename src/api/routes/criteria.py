"""Criteria-set comparison and copy routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_comparison_service, get_criteria_service, get_user_id
from src.api.schemas import (
    CompareCriteriaRequest,
    ComparisonOut,
    CopyCriteriaRequest,
    CriteriaVersionOut,
    Envelope,
)
from src.domain.services import ComparisonService, CriteriaService

router = APIRouter(prefix="/criteria", tags=["Criteria"])


@router.post("/compare")
async def compare_criteria(
    payload: CompareCriteriaRequest,
    user_id: UUID = Depends(get_user_id),
    service: ComparisonService = Depends(get_comparison_service),
) -> Envelope[ComparisonOut]:
    result = await service.compare(
        user_id,
        payload.set_a_id,
        payload.set_b_id,
        [a.to_domain() for a in payload.assets],
    )
    return Envelope[ComparisonOut](data=ComparisonOut.model_validate(result))


@router.post("/{version_id}/copy", status_code=status.HTTP_201_CREATED)
async def copy_criteria(
    version_id: UUID,
    payload: CopyCriteriaRequest | None = None,
    user_id: UUID = Depends(get_user_id),
    service: CriteriaService = Depends(get_criteria_service),
) -> Envelope[CriteriaVersionOut]:
    payload = payload or CopyCriteriaRequest()
    copied = await service.copy(
        user_id, version_id, name=payload.name, target_market=payload.target_market
    )
    return Envelope[CriteriaVersionOut](data=CriteriaVersionOut.model_validate(copied))
