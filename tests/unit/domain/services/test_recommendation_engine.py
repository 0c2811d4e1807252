"""Tests for build_recommendation_items, the pure allocation engine."""

from decimal import Decimal
from uuid import uuid4

from src.domain.models.numeric import sum_decimals
from src.domain.models.portfolio import AssetClass, Portfolio, PortfolioAsset
from src.domain.services.recommendation import DEFAULT_SCORE, build_recommendation_items

USER = uuid4()
PORTFOLIO = uuid4()


def _class(name, lo, hi, **kw):
    return AssetClass(user_id=USER, name=name, target_min=lo, target_max=hi, **kw)


def _holding(symbol, asset_class, value, **kw):
    return PortfolioAsset(
        portfolio_id=PORTFOLIO,
        symbol=symbol,
        quantity=value,
        purchase_price="1",
        asset_class_id=asset_class.class_id if asset_class else None,
        **kw,
    )


def _run(classes, holdings, total="1000", scores=None, places=2):
    portfolio = Portfolio(portfolio_id=PORTFOLIO, user_id=USER, name="Main", assets=holdings)
    values = {a.asset_id: a.value for a in holdings}
    scores = {h.asset_id: Decimal(s) for h, s in (scores or {}).items()}
    return build_recommendation_items(
        portfolio, classes, values, scores, Decimal(total), places=places
    )


def _amounts(items):
    return {i.symbol: i.recommended_amount for i in items}


# --- balanced / basic split ---


def test_balanced_portfolio_returns_no_items():
    stocks = _class("Stocks", "40", "60")
    bonds = _class("Bonds", "40", "60")
    items = _run([stocks, bonds], [_holding("S", stocks, "50"), _holding("B", bonds, "50")])
    assert items == []


def test_only_under_allocated_class_receives_money():
    stocks = _class("Stocks", "40", "60")
    bonds = _class("Bonds", "40", "60")
    items = _run([stocks, bonds], [_holding("S", stocks, "80"), _holding("B", bonds, "20")])

    assert _amounts(items) == {"S": Decimal("0"), "B": Decimal("1000")}
    by_symbol = {i.symbol: i for i in items}
    assert by_symbol["S"].is_over_allocated is True
    assert by_symbol["B"].is_over_allocated is False
    assert by_symbol["B"].allocation_gap == Decimal("20")
    assert by_symbol["S"].allocation_gap == Decimal("0")
    assert items[0].symbol == "B"


def test_split_follows_gap_times_score():
    stocks = _class("Stocks", "0", "100")
    bonds = _class("Bonds", "40", "60")
    b1, b2 = _holding("B1", bonds, "10"), _holding("B2", bonds, "10")
    items = _run(
        [stocks, bonds],
        [_holding("S", stocks, "80"), b1, b2],
        scores={b1: "80", b2: "20"},
    )
    assert _amounts(items)["B1"] == Decimal("800")
    assert _amounts(items)["B2"] == Decimal("200")


def test_unscored_assets_use_default_score():
    stocks = _class("Stocks", "0", "100")
    bonds = _class("Bonds", "40", "60")
    items = _run([stocks, bonds], [_holding("S", stocks, "80"), _holding("B", bonds, "20")])
    assert {i.score for i in items} == {DEFAULT_SCORE}


# --- totals and rounding ---


def test_amounts_sum_to_total_with_residue_on_top_item():
    a = _class("A", "50", "60")
    b = _class("B", "30", "40")
    rest = _class("Rest", "0", "100")
    items = _run(
        [a, b, rest],
        [_holding("A1", a, "10"), _holding("B1", b, "10"), _holding("R", rest, "80")],
        total="100",
    )
    amounts = _amounts(items)
    assert amounts["A1"] == Decimal("66.67")
    assert amounts["B1"] == Decimal("33.33")
    assert sum_decimals(amounts.values()) == Decimal("100")


def test_zero_decimal_currency_rounds_to_whole_units():
    a = _class("A", "50", "60")
    b = _class("B", "30", "40")
    rest = _class("Rest", "0", "100")
    items = _run(
        [a, b, rest],
        [_holding("A1", a, "10"), _holding("B1", b, "10"), _holding("R", rest, "80")],
        total="1000",
        places=0,
    )
    amounts = _amounts(items)
    assert amounts["A1"] == Decimal("667")
    assert amounts["B1"] == Decimal("333")
    assert all(v == v.to_integral_value() for v in amounts.values())


def test_all_zero_scores_fall_back_to_gap():
    a = _class("A", "50", "60")
    b = _class("B", "30", "40")
    rest = _class("Rest", "0", "100")
    a1, a2, b1 = _holding("A1", a, "5"), _holding("A2", a, "5"), _holding("B1", b, "10")
    items = _run(
        [a, b, rest],
        [a1, a2, b1, _holding("R", rest, "80")],
        total="300",
        scores={a1: "0", a2: "0", b1: "0"},
    )
    amounts = _amounts(items)
    # weights are the class gaps: 40, 40, 20
    assert amounts["A1"] == Decimal("120")
    assert amounts["A2"] == Decimal("120")
    assert amounts["B1"] == Decimal("60")


# --- class rules ---


def test_max_assets_caps_recommended_holdings():
    stocks = _class("Stocks", "0", "100")
    bonds = _class("Bonds", "40", "60", max_assets=1)
    top, low = _holding("TOP", bonds, "10"), _holding("LOW", bonds, "10")
    items = _run(
        [stocks, bonds],
        [_holding("S", stocks, "80"), top, low],
        scores={top: "90", low: "10"},
    )
    amounts = _amounts(items)
    assert amounts["TOP"] == Decimal("1000")
    assert amounts["LOW"] == Decimal("0")


def test_class_below_minimum_value_is_pooled_into_others():
    a = _class("A", "50", "60")
    b = _class("B", "30", "40", min_allocation_value="50")
    rest = _class("Rest", "0", "100")
    items = _run(
        [a, b, rest],
        [_holding("A1", a, "10"), _holding("B1", b, "10"), _holding("R", rest, "80")],
        total="100",
    )
    amounts = _amounts(items)
    assert amounts["A1"] == Decimal("100")
    assert amounts["B1"] == Decimal("0")


def test_last_class_is_never_dropped_for_minimum_value():
    stocks = _class("Stocks", "0", "100")
    bonds = _class("Bonds", "40", "60", min_allocation_value="5000")
    items = _run([stocks, bonds], [_holding("S", stocks, "80"), _holding("B", bonds, "20")])
    assert _amounts(items)["B"] == Decimal("1000")


# --- excluded holdings ---


def test_ignored_holdings_are_excluded():
    stocks = _class("Stocks", "40", "60")
    bonds = _class("Bonds", "40", "60")
    items = _run(
        [stocks, bonds],
        [
            _holding("S", stocks, "80"),
            _holding("B", bonds, "20"),
            _holding("OLD", bonds, "5000", is_ignored=True),
        ],
    )
    assert "OLD" not in _amounts(items)
    assert _amounts(items)["B"] == Decimal("1000")


def test_unclassified_holdings_get_no_item():
    stocks = _class("Stocks", "0", "100")
    bonds = _class("Bonds", "40", "60")
    items = _run(
        [stocks, bonds],
        [_holding("S", stocks, "70"), _holding("B", bonds, "20"), _holding("CASH", None, "10")],
    )
    assert set(_amounts(items)) == {"S", "B"}
    assert sum_decimals(i.recommended_amount for i in items) == Decimal("1000")
