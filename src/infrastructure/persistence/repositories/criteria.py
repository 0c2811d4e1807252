"""SQLAlchemy implementation of CriteriaRepository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.models.criteria import CriteriaVersion as DomainVersion
from src.domain.models.criteria import Criterion
from src.domain.repositories.criteria import CriteriaRepository
from src.infrastructure.persistence.models.criteria import CriteriaVersion as OrmVersion


def _version_to_domain(row: OrmVersion) -> DomainVersion:
    return DomainVersion(
        version_id=row.version_id,
        user_id=row.user_id,
        name=row.name,
        target_market=row.target_market,
        version=row.version,
        criteria=[Criterion.model_validate(c) for c in row.criteria],
        is_active=row.is_active,
        created_at=row.created_at,
    )


class SqlCriteriaRepository(CriteriaRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, version_id: UUID) -> DomainVersion | None:
        stmt = select(OrmVersion).where(OrmVersion.version_id == version_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _version_to_domain(row) if row else None

    async def list_for_user(
        self,
        user_id: UUID,
        target_market: str | None = None,
        active_only: bool = True,
    ) -> list[DomainVersion]:
        stmt = select(OrmVersion).where(OrmVersion.user_id == user_id)
        if active_only:
            stmt = stmt.where(OrmVersion.is_active.is_(True))
        if target_market is not None:
            stmt = stmt.where(OrmVersion.target_market == target_market)
        stmt = stmt.order_by(OrmVersion.created_at.desc(), OrmVersion.version.desc())
        result = await self._session.execute(stmt)
        return [_version_to_domain(row) for row in result.scalars()]

    async def count_active(self, user_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(OrmVersion)
            .where(OrmVersion.user_id == user_id, OrmVersion.is_active.is_(True))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainVersion]:
        stmt = select(OrmVersion).order_by(OrmVersion.created_at.desc()).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [_version_to_domain(row) for row in result.scalars()]

    async def create(self, entity: DomainVersion) -> DomainVersion:
        row = OrmVersion(
            version_id=entity.version_id,
            user_id=entity.user_id,
            name=entity.name,
            target_market=entity.target_market,
            version=entity.version,
            criteria=[c.model_dump(mode="json") for c in entity.criteria],
            is_active=entity.is_active,
            created_at=entity.created_at,
        )
        self._session.add(row)
        return entity

    async def update(self, entity: DomainVersion) -> DomainVersion:
        stmt = select(OrmVersion).where(OrmVersion.version_id == entity.version_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise ValueError(f"Criteria version {entity.version_id} not found")
        # Criteria are immutable once written; only activation changes.
        row.is_active = entity.is_active
        return entity

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("Criteria versions are soft-deleted via update()")
