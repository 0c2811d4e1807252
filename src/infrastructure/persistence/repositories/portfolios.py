"""SQLAlchemy implementations of the portfolio, asset class and investment repositories."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domain.models.portfolio import AssetClass as DomainAssetClass
from src.domain.models.portfolio import Investment as DomainInvestment
from src.domain.models.portfolio import Portfolio as DomainPortfolio
from src.domain.models.portfolio import PortfolioAsset as DomainAsset
from src.domain.repositories.portfolios import (
    AssetClassRepository,
    InvestmentRepository,
    PortfolioRepository,
)
from src.infrastructure.persistence.models.portfolio import AssetClass as OrmAssetClass
from src.infrastructure.persistence.models.portfolio import Investment as OrmInvestment
from src.infrastructure.persistence.models.portfolio import Portfolio as OrmPortfolio
from src.infrastructure.persistence.models.portfolio import PortfolioAsset as OrmAsset


def _asset_to_domain(row: OrmAsset) -> DomainAsset:
    return DomainAsset(
        asset_id=row.asset_id,
        portfolio_id=row.portfolio_id,
        symbol=row.symbol,
        quantity=row.quantity,
        purchase_price=row.purchase_price,
        current_price=row.current_price,
        currency=row.currency,
        asset_class_id=row.asset_class_id,
        subclass_id=row.subclass_id,
        is_ignored=row.is_ignored,
    )


def _portfolio_to_domain(row: OrmPortfolio, include_assets: bool = True) -> DomainPortfolio:
    assets = [_asset_to_domain(a) for a in row.assets] if include_assets else []
    return DomainPortfolio(
        portfolio_id=row.portfolio_id,
        user_id=row.user_id,
        name=row.name,
        base_currency=row.base_currency,
        assets=assets,
        created_at=row.created_at,
    )


def _class_to_domain(row: OrmAssetClass) -> DomainAssetClass:
    return DomainAssetClass(
        class_id=row.class_id,
        user_id=row.user_id,
        name=row.name,
        target_min=row.target_min,
        target_max=row.target_max,
        max_assets=row.max_assets,
        min_allocation_value=row.min_allocation_value,
        created_at=row.created_at,
    )


def _investment_to_domain(row: OrmInvestment) -> DomainInvestment:
    return DomainInvestment(
        investment_id=row.investment_id,
        user_id=row.user_id,
        portfolio_id=row.portfolio_id,
        asset_id=row.asset_id,
        symbol=row.symbol,
        quantity=row.quantity,
        price_per_unit=row.price_per_unit,
        total_amount=row.total_amount,
        currency=row.currency,
        recommendation_id=row.recommendation_id,
        recommended_amount=row.recommended_amount,
        invested_at=row.invested_at,
    )


class SqlPortfolioRepository(PortfolioRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, portfolio_id: UUID) -> DomainPortfolio | None:
        stmt = (
            select(OrmPortfolio)
            .options(selectinload(OrmPortfolio.assets))
            .where(OrmPortfolio.portfolio_id == portfolio_id)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _portfolio_to_domain(row) if row else None

    async def get_for_user(self, user_id: UUID) -> DomainPortfolio | None:
        stmt = (
            select(OrmPortfolio)
            .options(selectinload(OrmPortfolio.assets))
            .where(OrmPortfolio.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _portfolio_to_domain(row) if row else None

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainPortfolio]:
        # Header rows only; use get_by_id() for the full aggregate.
        stmt = (
            select(OrmPortfolio)
            .order_by(OrmPortfolio.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_portfolio_to_domain(row, include_assets=False) for row in result.scalars()]

    async def create(self, entity: DomainPortfolio) -> DomainPortfolio:
        row = OrmPortfolio(
            portfolio_id=entity.portfolio_id,
            user_id=entity.user_id,
            name=entity.name,
            base_currency=entity.base_currency,
            created_at=entity.created_at,
        )
        asset_rows = [
            OrmAsset(
                asset_id=a.asset_id,
                portfolio_id=entity.portfolio_id,
                symbol=a.symbol,
                quantity=a.quantity,
                purchase_price=a.purchase_price,
                current_price=a.current_price,
                currency=a.currency,
                asset_class_id=a.asset_class_id,
                subclass_id=a.subclass_id,
                is_ignored=a.is_ignored,
            )
            for a in entity.assets
        ]
        row.assets = asset_rows
        self._session.add(row)
        return entity

    async def update(self, entity: DomainPortfolio) -> DomainPortfolio:
        stmt = select(OrmPortfolio).where(OrmPortfolio.portfolio_id == entity.portfolio_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise ValueError(f"Portfolio {entity.portfolio_id} not found")
        row.name = entity.name
        row.base_currency = entity.base_currency
        return entity

    async def increment_asset_quantity(self, asset_id: UUID, delta: Decimal) -> Decimal:
        stmt = (
            update(OrmAsset)
            .where(OrmAsset.asset_id == asset_id)
            .values(quantity=OrmAsset.quantity + delta)
            .returning(OrmAsset.quantity)
        )
        result = await self._session.execute(stmt)
        quantity = result.scalar_one_or_none()
        if quantity is None:
            raise ValueError(f"Portfolio asset {asset_id} not found")
        return quantity

    async def delete(self, id: UUID) -> None:
        stmt = select(OrmPortfolio).where(OrmPortfolio.portfolio_id == id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            await self._session.delete(row)


class SqlAssetClassRepository(AssetClassRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, class_id: UUID) -> DomainAssetClass | None:
        stmt = select(OrmAssetClass).where(OrmAssetClass.class_id == class_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _class_to_domain(row) if row else None

    async def list_for_user(self, user_id: UUID) -> list[DomainAssetClass]:
        stmt = (
            select(OrmAssetClass)
            .where(OrmAssetClass.user_id == user_id)
            .order_by(OrmAssetClass.name)
        )
        result = await self._session.execute(stmt)
        return [_class_to_domain(row) for row in result.scalars()]

    async def count_for_user(self, user_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(OrmAssetClass)
            .where(OrmAssetClass.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainAssetClass]:
        stmt = (
            select(OrmAssetClass)
            .order_by(OrmAssetClass.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_class_to_domain(row) for row in result.scalars()]

    async def create(self, entity: DomainAssetClass) -> DomainAssetClass:
        row = OrmAssetClass(
            class_id=entity.class_id,
            user_id=entity.user_id,
            name=entity.name,
            target_min=entity.target_min,
            target_max=entity.target_max,
            max_assets=entity.max_assets,
            min_allocation_value=entity.min_allocation_value,
            created_at=entity.created_at,
        )
        self._session.add(row)
        return entity

    async def update(self, entity: DomainAssetClass) -> DomainAssetClass:
        stmt = select(OrmAssetClass).where(OrmAssetClass.class_id == entity.class_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise ValueError(f"Asset class {entity.class_id} not found")
        row.name = entity.name
        row.target_min = entity.target_min
        row.target_max = entity.target_max
        row.max_assets = entity.max_assets
        row.min_allocation_value = entity.min_allocation_value
        return entity

    async def delete(self, id: UUID) -> None:
        stmt = select(OrmAssetClass).where(OrmAssetClass.class_id == id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            await self._session.delete(row)


class SqlInvestmentRepository(InvestmentRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_many(self, investments: list[DomainInvestment]) -> list[DomainInvestment]:
        rows = [
            OrmInvestment(
                investment_id=i.investment_id,
                user_id=i.user_id,
                portfolio_id=i.portfolio_id,
                asset_id=i.asset_id,
                symbol=i.symbol,
                quantity=i.quantity,
                price_per_unit=i.price_per_unit,
                total_amount=i.total_amount,
                currency=i.currency,
                recommendation_id=i.recommendation_id,
                recommended_amount=i.recommended_amount,
                invested_at=i.invested_at,
            )
            for i in investments
        ]
        self._session.add_all(rows)
        return investments

    async def list_for_user(
        self, user_id: UUID, limit: int = 50, offset: int = 0
    ) -> list[DomainInvestment]:
        stmt = (
            select(OrmInvestment)
            .where(OrmInvestment.user_id == user_id)
            .order_by(OrmInvestment.invested_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_investment_to_domain(row) for row in result.scalars()]
