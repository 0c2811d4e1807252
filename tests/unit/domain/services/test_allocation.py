"""Tests for allocation summaries and target-range warnings."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.domain.errors import LimitExceededError, PortfolioNotFound
from src.domain.models.allocation import MINIMUM_SUM_EXCEEDS_100
from src.domain.models.enums import AllocationStatus
from src.domain.models.exchange import ExchangeRate
from src.domain.models.portfolio import (
    MAX_ASSET_CLASSES_PER_USER,
    AssetClass,
    Portfolio,
    PortfolioAsset,
)
from src.domain.repositories.exchange_rates import ExchangeRateRepository
from src.domain.repositories.portfolios import AssetClassRepository, PortfolioRepository
from src.domain.services.allocation import (
    AllocationService,
    classify,
    holding_values,
    summarize_allocation,
    validate_allocation_ranges,
)
from src.domain.services.currency import CurrencyConverter

USER = uuid4()
PORTFOLIO = uuid4()


class _Rates(ExchangeRateRepository):
    def __init__(self, *rates):
        self.rates = list(rates)

    async def find_rate(self, base_currency, quote_currency, at):
        for r in self.rates:
            if r.base_currency == base_currency and r.quote_currency == quote_currency:
                return r
        return None

    async def add_many(self, rates):
        self.rates.extend(rates)
        return len(rates)


def _class(name, lo, hi):
    return AssetClass(user_id=USER, name=name, target_min=lo, target_max=hi)


def _holding(symbol, asset_class, qty, price="1", **kw):
    return PortfolioAsset(
        portfolio_id=PORTFOLIO,
        symbol=symbol,
        quantity=qty,
        purchase_price=price,
        asset_class_id=asset_class.class_id if asset_class else None,
        **kw,
    )


def _portfolio(*assets, base="USD"):
    return Portfolio(portfolio_id=PORTFOLIO, user_id=USER, name="Main", base_currency=base, assets=list(assets))


# --- validate_allocation_ranges ---


def test_minimums_over_100_warn():
    warnings = validate_allocation_ranges([_class("A", "60", "80"), _class("B", "50", "70")])
    assert [w.code for w in warnings] == [MINIMUM_SUM_EXCEEDS_100]
    assert warnings[0].total_minimum == Decimal("110")
    assert "110%" in warnings[0].message


def test_minimums_of_exactly_100_are_fine():
    assert validate_allocation_ranges([_class("A", "60", "80"), _class("B", "40", "70")]) == []


# --- summarize_allocation ---


def test_classify_boundaries_are_on_target():
    c = _class("A", "40", "60")
    assert classify(Decimal("40"), c) is AllocationStatus.ON_TARGET
    assert classify(Decimal("60"), c) is AllocationStatus.ON_TARGET
    assert classify(Decimal("39.9999"), c) is AllocationStatus.UNDER
    assert classify(Decimal("60.0001"), c) is AllocationStatus.OVER


def test_summary_excludes_ignored_from_percentages():
    stocks, bonds = _class("Stocks", "40", "60"), _class("Bonds", "30", "50")
    assets = [
        _holding("VTI", stocks, "70"),
        _holding("BND", bonds, "30"),
        _holding("OLD", stocks, "900", is_ignored=True),
    ]
    portfolio = _portfolio(*assets)
    summary = summarize_allocation(portfolio, [stocks, bonds], {a.asset_id: a.value for a in assets})

    assert summary.total_value == Decimal("1000")
    assert summary.allocatable_value == Decimal("100")
    assert summary.ignored_value == Decimal("900")
    rows = {r.name: r for r in summary.classes}
    assert rows["Stocks"].current_percent == Decimal("70")
    assert rows["Stocks"].status is AllocationStatus.OVER
    assert rows["Stocks"].asset_count == 1
    assert rows["Bonds"].status is AllocationStatus.ON_TARGET


def test_summary_unclassified_dilutes_classes():
    stocks = _class("Stocks", "40", "60")
    assets = [_holding("VTI", stocks, "30"), _holding("CASH", None, "70")]
    summary = summarize_allocation(_portfolio(*assets), [stocks], {a.asset_id: a.value for a in assets})
    assert summary.unclassified_value == Decimal("70")
    assert summary.classes[0].current_percent == Decimal("30")
    assert summary.classes[0].status is AllocationStatus.UNDER


def test_summary_of_empty_portfolio():
    stocks = _class("Stocks", "40", "60")
    summary = summarize_allocation(_portfolio(), [stocks], {})
    assert summary.total_value == Decimal("0")
    assert summary.classes[0].current_percent == Decimal("0")
    assert summary.classes[0].status is AllocationStatus.UNDER


def test_summary_carries_range_warnings():
    classes = [_class("A", "70", "80"), _class("B", "50", "70")]
    summary = summarize_allocation(_portfolio(), classes, {})
    assert summary.warnings[0].code == MINIMUM_SUM_EXCEEDS_100


# --- holding_values ---


async def test_holding_values_convert_to_base_currency():
    stocks = _class("Stocks", "0", "100")
    usd = _holding("VTI", stocks, "2", price="10")
    brl = _holding("ITSA4", stocks, "5", price="10", currency="BRL")
    rate = ExchangeRate(
        base_currency="USD",
        quote_currency="BRL",
        rate="5",
        rate_date=datetime.now(timezone.utc) - timedelta(hours=1),
        source="ecb",
    )
    values = await holding_values(_portfolio(usd, brl), CurrencyConverter(_Rates(rate)))
    assert values[usd.asset_id] == Decimal("20")
    assert values[brl.asset_id] == Decimal("10.00")


async def test_holding_values_same_currency_skips_lookup():
    stocks = _class("Stocks", "0", "100")
    asset = _holding("VTI", stocks, "3", price="7")
    rates = AsyncMock(spec=ExchangeRateRepository)
    values = await holding_values(_portfolio(asset), CurrencyConverter(rates))
    assert values[asset.asset_id] == Decimal("21")
    rates.find_rate.assert_not_awaited()


# --- AllocationService ---


def _service(portfolio=None, classes=(), count=0):
    portfolios = AsyncMock(spec=PortfolioRepository)
    portfolios.get_for_user.return_value = portfolio
    asset_classes = AsyncMock(spec=AssetClassRepository)
    asset_classes.list_for_user.return_value = list(classes)
    asset_classes.count_for_user.return_value = count
    asset_classes.create.side_effect = lambda c: c
    return AllocationService(portfolios, asset_classes, CurrencyConverter(_Rates())), asset_classes


async def test_get_summary_without_portfolio():
    svc, _ = _service()
    with pytest.raises(PortfolioNotFound):
        await svc.get_summary(USER)


async def test_get_summary():
    stocks = _class("Stocks", "40", "60")
    svc, _ = _service(_portfolio(_holding("VTI", stocks, "10")), [stocks])
    summary = await svc.get_summary(USER)
    assert summary.classes[0].current_percent == Decimal("100")


async def test_add_asset_class_limit():
    svc, asset_classes = _service(count=MAX_ASSET_CLASSES_PER_USER)
    with pytest.raises(LimitExceededError):
        await svc.add_asset_class(_class("Extra", "0", "10"))
    asset_classes.create.assert_not_awaited()


async def test_add_asset_class_reports_warnings():
    existing = _class("Stocks", "80", "90")
    svc, _ = _service(classes=[existing], count=1)
    created, warnings = await svc.add_asset_class(_class("Bonds", "30", "40"))
    assert created.name == "Bonds"
    assert warnings[0].total_minimum == Decimal("110")
