"""Currency conversion and portfolio allocation routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from src.api.dependencies import get_allocation_service, get_converter, get_user_id
from src.api.schemas import AllocationSummaryOut, ConversionOut, ConvertRequest, Envelope
from src.domain.services import AllocationService, CurrencyConverter

router = APIRouter(tags=["Data"])


@router.post("/data/convert")
async def convert_currency(
    payload: ConvertRequest,
    user_id: UUID = Depends(get_user_id),
    converter: CurrencyConverter = Depends(get_converter),
) -> Envelope[ConversionOut]:
    result = await converter.convert(
        payload.value,
        payload.from_currency,
        payload.to_currency,
        rate_date=payload.rate_date,
    )
    return Envelope[ConversionOut](data=ConversionOut.model_validate(result))


@router.get("/portfolio/allocation")
async def allocation_summary(
    user_id: UUID = Depends(get_user_id),
    service: AllocationService = Depends(get_allocation_service),
) -> Envelope[AllocationSummaryOut]:
    summary = await service.get_summary(user_id)
    return Envelope[AllocationSummaryOut](data=AllocationSummaryOut.model_validate(summary))
