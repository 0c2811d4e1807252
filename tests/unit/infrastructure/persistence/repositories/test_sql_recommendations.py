"""Tests for SqlRecommendationRepository: mapping, confirmation and immutability guards."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.domain.models.enums import RecommendationStatus
from src.infrastructure.persistence.repositories.recommendations import (
    SqlRecommendationRepository,
    _recommendation_to_domain,
)

NOW = datetime(2026, 2, 1, tzinfo=timezone.utc)


def _orm_item(**overrides):
    defaults = {
        "asset_id": uuid4(),
        "position": 0,
        "symbol": "BND",
        "asset_class_id": uuid4(),
        "asset_class_name": "Bonds",
        "score": Decimal("50.0000"),
        "current_allocation": Decimal("20.0000"),
        "target_allocation": Decimal("40.0000"),
        "allocation_gap": Decimal("20.0000"),
        "recommended_amount": Decimal("1000.0000"),
        "is_over_allocated": False,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _orm_recommendation(**overrides):
    defaults = {
        "recommendation_id": uuid4(),
        "user_id": uuid4(),
        "portfolio_id": uuid4(),
        "contribution": Decimal("900.0000"),
        "dividends": Decimal("100.0000"),
        "total_investable": Decimal("1000.0000"),
        "base_currency": "USD",
        "status": "pending",
        "correlation_id": uuid4(),
        "generated_at": NOW,
        "expires_at": NOW + timedelta(hours=24),
        "confirmed_at": None,
        "items": [_orm_item()],
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# --- mapping ---

def test_recommendation_to_domain_includes_items():
    result = _recommendation_to_domain(_orm_recommendation())
    assert result.items[0].recommended_amount == Decimal("1000")
    assert result.total_investable == Decimal("1000")


def test_recommendation_to_domain_omits_items_when_not_requested():
    assert _recommendation_to_domain(_orm_recommendation(), include_items=False).items == []


def test_recommendation_to_domain_maps_status():
    row = _orm_recommendation(status="confirmed", confirmed_at=NOW)
    assert _recommendation_to_domain(row).status is RecommendationStatus.CONFIRMED


# --- writes ---

async def test_create_numbers_items_in_order():
    session = AsyncMock()
    session.add = MagicMock()
    rec = _recommendation_to_domain(
        _orm_recommendation(items=[_orm_item(symbol="A"), _orm_item(symbol="B")])
    )
    await SqlRecommendationRepository(session).create(rec)
    (row,) = session.add.call_args.args
    assert [(i.position, i.symbol) for i in row.items] == [(0, "A"), (1, "B")]
    assert row.status == "pending"


@pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
async def test_mark_confirmed_reports_whether_row_flipped(rowcount, expected):
    session = AsyncMock()
    session.execute.return_value = MagicMock(rowcount=rowcount)
    assert await SqlRecommendationRepository(session).mark_confirmed(uuid4(), NOW) is expected


# --- immutability guards ---

async def test_update_raises():
    with pytest.raises(NotImplementedError):
        await SqlRecommendationRepository(AsyncMock()).update(None)  # type: ignore[arg-type]


async def test_delete_raises():
    with pytest.raises(NotImplementedError):
        await SqlRecommendationRepository(AsyncMock()).delete(uuid4())
