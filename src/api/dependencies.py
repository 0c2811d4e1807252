"""FastAPI dependency wiring: caller identity, repositories and services."""

from __future__ import annotations

from datetime import timedelta
from uuid import UUID

import redis.asyncio as redis
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.errors import ValidationError
from src.domain.services import (
    AllocationService,
    ComparisonService,
    CriteriaEvaluator,
    CriteriaService,
    CurrencyConverter,
    RecommendationService,
    ScoringService,
)
from src.infrastructure.cache import RedisRecommendationCache
from src.infrastructure.config import settings
from src.infrastructure.database import AsyncSessionLocal, get_session
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlUnitOfWork,
    get_repositories,
)


async def get_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Identity of the caller, set by the authenticating proxy in front of the API."""
    if not x_user_id:
        raise ValidationError("X-User-Id header is required")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise ValidationError("X-User-Id header must be a UUID") from None


async def get_repos(session: AsyncSession = Depends(get_session)) -> Repositories:
    return get_repositories(session)


def get_redis(request: Request) -> redis.Redis:
    return request.app.state.redis


def get_converter(repos: Repositories = Depends(get_repos)) -> CurrencyConverter:
    return CurrencyConverter(
        repos.exchange_rates, stale_after=timedelta(hours=settings.rate_stale_hours)
    )


def get_scoring_service(repos: Repositories = Depends(get_repos)) -> ScoringService:
    return ScoringService(
        repos.criteria,
        repos.scores,
        repos.audit,
        evaluator=CriteriaEvaluator(),
        fresh_for=timedelta(hours=settings.score_fresh_hours),
    )


def get_recommendation_service(
    repos: Repositories = Depends(get_repos),
    client: redis.Redis = Depends(get_redis),
    converter: CurrencyConverter = Depends(get_converter),
) -> RecommendationService:
    return RecommendationService(
        portfolios=repos.portfolios,
        asset_classes=repos.asset_classes,
        scores=repos.scores,
        recommendations=repos.recommendations,
        cache=RedisRecommendationCache(client),
        audit=repos.audit,
        unit_of_work=SqlUnitOfWork(AsyncSessionLocal),
        converter=converter,
        ttl=timedelta(hours=settings.recommendation_ttl_hours),
    )


def get_comparison_service(
    repos: Repositories = Depends(get_repos),
    scoring: ScoringService = Depends(get_scoring_service),
) -> ComparisonService:
    return ComparisonService(
        repos.criteria, scoring, sample_size=settings.comparison_sample_size
    )


def get_criteria_service(repos: Repositories = Depends(get_repos)) -> CriteriaService:
    return CriteriaService(repos.criteria)


def get_allocation_service(
    repos: Repositories = Depends(get_repos),
    converter: CurrencyConverter = Depends(get_converter),
) -> AllocationService:
    return AllocationService(repos.portfolios, repos.asset_classes, converter)
