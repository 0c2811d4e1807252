"""Tests for the SQL portfolio, asset class and investment repositories."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from src.domain.models.portfolio import Investment, Portfolio, PortfolioAsset
from src.infrastructure.persistence.repositories.portfolios import (
    SqlInvestmentRepository,
    SqlPortfolioRepository,
    _class_to_domain,
    _portfolio_to_domain,
)


def _orm_asset(portfolio_id, **overrides):
    defaults = {
        "asset_id": uuid4(),
        "portfolio_id": portfolio_id,
        "symbol": "VTI",
        "quantity": Decimal("3.50000000"),
        "purchase_price": Decimal("200.0000"),
        "current_price": None,
        "currency": "USD",
        "asset_class_id": None,
        "subclass_id": None,
        "is_ignored": False,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _orm_portfolio(**overrides):
    pid = uuid4()
    defaults = {
        "portfolio_id": pid,
        "user_id": uuid4(),
        "name": "Main",
        "base_currency": "BRL",
        "created_at": datetime.now(timezone.utc),
        "assets": [_orm_asset(pid)],
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _session_returning(row):
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    session.execute.return_value = result
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


# --- mapping ---

def test_portfolio_to_domain_includes_assets_when_requested():
    assert len(_portfolio_to_domain(_orm_portfolio()).assets) == 1


def test_portfolio_to_domain_omits_assets_when_not_requested():
    assert _portfolio_to_domain(_orm_portfolio(), include_assets=False).assets == []


def test_asset_without_current_price_is_valued_at_purchase_price():
    asset = _portfolio_to_domain(_orm_portfolio()).assets[0]
    assert asset.value == Decimal("700")


def test_class_to_domain_maps_limits():
    row = SimpleNamespace(
        class_id=uuid4(),
        user_id=uuid4(),
        name="FIIs",
        target_min=Decimal("10.0000"),
        target_max=Decimal("20.0000"),
        max_assets=5,
        min_allocation_value=Decimal("100.0000"),
        created_at=datetime.now(timezone.utc),
    )
    result = _class_to_domain(row)
    assert result.max_assets == 5
    assert result.min_allocation_value == Decimal("100")


# --- writes ---

async def test_create_attaches_asset_rows():
    session = _session_returning(None)
    pid = uuid4()
    portfolio = Portfolio(
        portfolio_id=pid,
        user_id=uuid4(),
        name="Main",
        assets=[PortfolioAsset(portfolio_id=pid, symbol="BND", quantity="1", purchase_price="70")],
    )
    await SqlPortfolioRepository(session).create(portfolio)
    (row,) = session.add.call_args.args
    assert [a.symbol for a in row.assets] == ["BND"]


async def test_increment_asset_quantity_adds_in_database():
    session = _session_returning(Decimal("12.50000000"))
    asset_id = uuid4()

    new_quantity = await SqlPortfolioRepository(session).increment_asset_quantity(
        asset_id, Decimal("2.5")
    )

    assert new_quantity == Decimal("12.5")
    (stmt,) = session.execute.await_args.args
    sql = str(stmt.compile(dialect=postgresql.dialect()))
    assert sql.startswith("UPDATE portfolio_assets SET quantity=")
    assert "portfolio_assets.quantity + " in sql
    assert "RETURNING portfolio_assets.quantity" in sql
    session.add.assert_not_called()


async def test_increment_asset_quantity_missing_asset_raises():
    with pytest.raises(ValueError):
        await SqlPortfolioRepository(_session_returning(None)).increment_asset_quantity(
            uuid4(), Decimal("1")
        )


async def test_add_many_investments():
    session = _session_returning(None)
    inv = Investment(
        user_id=uuid4(),
        portfolio_id=uuid4(),
        asset_id=uuid4(),
        symbol="VTI",
        quantity="0.5",
        price_per_unit="200",
        total_amount="100",
        currency="USD",
    )
    assert await SqlInvestmentRepository(session).add_many([inv]) == [inv]
    (rows,) = session.add_all.call_args.args
    assert rows[0].total_amount == Decimal("100")
