"""Tests for the get_repositories() DI factory."""

from unittest.mock import AsyncMock

from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlAssetClassRepository,
    SqlAuditLog,
    SqlCriteriaRepository,
    SqlExchangeRateRepository,
    SqlInvestmentRepository,
    SqlPortfolioRepository,
    SqlRecommendationRepository,
    SqlScoreRepository,
    get_repositories,
)


def _repos():
    return get_repositories(AsyncMock())


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_criteria_is_correct_type():
    assert isinstance(_repos().criteria, SqlCriteriaRepository)


def test_repositories_scores_is_correct_type():
    assert isinstance(_repos().scores, SqlScoreRepository)


def test_repositories_portfolios_is_correct_type():
    assert isinstance(_repos().portfolios, SqlPortfolioRepository)


def test_repositories_asset_classes_is_correct_type():
    assert isinstance(_repos().asset_classes, SqlAssetClassRepository)


def test_repositories_investments_is_correct_type():
    assert isinstance(_repos().investments, SqlInvestmentRepository)


def test_repositories_recommendations_is_correct_type():
    assert isinstance(_repos().recommendations, SqlRecommendationRepository)


def test_repositories_exchange_rates_is_correct_type():
    assert isinstance(_repos().exchange_rates, SqlExchangeRateRepository)


def test_repositories_audit_is_correct_type():
    assert isinstance(_repos().audit, SqlAuditLog)


def test_repositories_share_one_session():
    session = AsyncMock()
    repos = get_repositories(session)
    assert repos.criteria._session is session
    assert repos.audit._session is session


def test_repositories_dataclass_has_eight_fields():
    assert len(Repositories.__dataclass_fields__) == 8
