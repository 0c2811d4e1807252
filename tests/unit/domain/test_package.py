"""Tests for src/domain/models/__init__.py: package exports."""

from src.domain.models import __all__ as domain_all
from src.domain.models import (
    # spot-check one import from each module
    AllocationSummary,
    AssetScore,
    CalculationEvent,
    ComparisonResult,
    CriteriaVersion,
    ExchangeRate,
    Operator,
    Portfolio,
    Recommendation,
)


def test_domain_models_exports_35_names():
    assert len(domain_all) == 35


def test_operator_importable_from_package():
    assert Operator.RANGE == "range"


def test_criteria_version_importable_from_package():
    assert CriteriaVersion.__name__ == "CriteriaVersion"


def test_asset_score_importable_from_package():
    assert AssetScore.__name__ == "AssetScore"


def test_portfolio_importable_from_package():
    assert Portfolio.__name__ == "Portfolio"


def test_recommendation_importable_from_package():
    assert Recommendation.__name__ == "Recommendation"


def test_exchange_rate_importable_from_package():
    assert ExchangeRate.__name__ == "ExchangeRate"


def test_comparison_result_importable_from_package():
    assert ComparisonResult.__name__ == "ComparisonResult"


def test_allocation_summary_importable_from_package():
    assert AllocationSummary.__name__ == "AllocationSummary"


def test_calculation_event_importable_from_package():
    assert CalculationEvent.__name__ == "CalculationEvent"
