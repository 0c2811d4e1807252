"""SQLAlchemy implementation of RecommendationRepository."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domain.models.enums import RecommendationStatus
from src.domain.models.recommendations import Recommendation as DomainRecommendation
from src.domain.models.recommendations import RecommendationItem as DomainItem
from src.domain.repositories.recommendations import RecommendationRepository
from src.infrastructure.persistence.models.recommendations import (
    Recommendation as OrmRecommendation,
)
from src.infrastructure.persistence.models.recommendations import (
    RecommendationItem as OrmItem,
)


def _item_to_domain(row: OrmItem) -> DomainItem:
    return DomainItem(
        asset_id=row.asset_id,
        symbol=row.symbol,
        asset_class_id=row.asset_class_id,
        asset_class_name=row.asset_class_name,
        score=row.score,
        current_allocation=row.current_allocation,
        target_allocation=row.target_allocation,
        allocation_gap=row.allocation_gap,
        recommended_amount=row.recommended_amount,
        is_over_allocated=row.is_over_allocated,
    )


def _recommendation_to_domain(
    row: OrmRecommendation, include_items: bool = True
) -> DomainRecommendation:
    items = [_item_to_domain(i) for i in row.items] if include_items else []
    return DomainRecommendation(
        recommendation_id=row.recommendation_id,
        user_id=row.user_id,
        portfolio_id=row.portfolio_id,
        contribution=row.contribution,
        dividends=row.dividends,
        total_investable=row.total_investable,
        base_currency=row.base_currency,
        items=items,
        status=RecommendationStatus(row.status),
        correlation_id=row.correlation_id,
        generated_at=row.generated_at,
        expires_at=row.expires_at,
        confirmed_at=row.confirmed_at,
    )


class SqlRecommendationRepository(RecommendationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, recommendation_id: UUID) -> DomainRecommendation | None:
        stmt = (
            select(OrmRecommendation)
            .options(selectinload(OrmRecommendation.items))
            .where(OrmRecommendation.recommendation_id == recommendation_id)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _recommendation_to_domain(row) if row else None

    async def get_latest_for_user(self, user_id: UUID) -> DomainRecommendation | None:
        stmt = (
            select(OrmRecommendation)
            .options(selectinload(OrmRecommendation.items))
            .where(OrmRecommendation.user_id == user_id)
            .order_by(OrmRecommendation.generated_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _recommendation_to_domain(row) if row else None

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainRecommendation]:
        stmt = (
            select(OrmRecommendation)
            .order_by(OrmRecommendation.generated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_recommendation_to_domain(row, include_items=False) for row in result.scalars()]

    async def create(self, entity: DomainRecommendation) -> DomainRecommendation:
        row = OrmRecommendation(
            recommendation_id=entity.recommendation_id,
            user_id=entity.user_id,
            portfolio_id=entity.portfolio_id,
            contribution=entity.contribution,
            dividends=entity.dividends,
            total_investable=entity.total_investable,
            base_currency=entity.base_currency,
            status=entity.status.value,
            correlation_id=entity.correlation_id,
            generated_at=entity.generated_at,
            expires_at=entity.expires_at,
            confirmed_at=entity.confirmed_at,
        )
        item_rows = [
            OrmItem(
                recommendation_id=entity.recommendation_id,
                asset_id=item.asset_id,
                position=position,
                symbol=item.symbol,
                asset_class_id=item.asset_class_id,
                asset_class_name=item.asset_class_name,
                score=item.score,
                current_allocation=item.current_allocation,
                target_allocation=item.target_allocation,
                allocation_gap=item.allocation_gap,
                recommended_amount=item.recommended_amount,
                is_over_allocated=item.is_over_allocated,
            )
            for position, item in enumerate(entity.items)
        ]
        row.items = item_rows
        self._session.add(row)
        return entity

    async def mark_confirmed(self, recommendation_id: UUID, confirmed_at: datetime) -> bool:
        stmt = (
            update(OrmRecommendation)
            .where(
                OrmRecommendation.recommendation_id == recommendation_id,
                OrmRecommendation.status == RecommendationStatus.PENDING.value,
            )
            .values(status=RecommendationStatus.CONFIRMED.value, confirmed_at=confirmed_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def update(self, entity: DomainRecommendation) -> DomainRecommendation:
        raise NotImplementedError("Recommendations are immutable; use mark_confirmed()")

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("Recommendations expire; they are not deleted")
