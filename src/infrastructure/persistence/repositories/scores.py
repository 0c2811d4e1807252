"""SQLAlchemy implementation of ScoreRepository."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.models.scores import AssetScore as DomainScore
from src.domain.models.scores import CriterionResult
from src.domain.models.scores import ScoreHistoryEntry as DomainHistory
from src.domain.repositories.scores import ScoreRepository
from src.infrastructure.persistence.models.scores import AssetScore as OrmScore
from src.infrastructure.persistence.models.scores import ScoreHistory as OrmHistory


def _score_to_domain(row: OrmScore) -> DomainScore:
    return DomainScore(
        score_id=row.score_id,
        user_id=row.user_id,
        asset_id=row.asset_id,
        symbol=row.symbol,
        criteria_version_id=row.criteria_version_id,
        score=row.score,
        breakdown=[CriterionResult.model_validate(r) for r in row.breakdown],
        correlation_id=row.correlation_id,
        calculated_at=row.calculated_at,
    )


def _history_to_domain(row: OrmHistory) -> DomainHistory:
    return DomainHistory(
        history_id=row.history_id,
        user_id=row.user_id,
        asset_id=row.asset_id,
        symbol=row.symbol,
        criteria_version_id=row.criteria_version_id,
        score=row.score,
        calculated_at=row.calculated_at,
    )


class SqlScoreRepository(ScoreRepository):
    """Writes run in their own SAVEPOINT and are flushed inside it.

    A failed upsert or history insert raises from the call that caused it
    and rolls back only its savepoint, so the request transaction stays
    usable for the remaining assets and the audit events of the batch.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, score_id: UUID) -> DomainScore | None:
        stmt = select(OrmScore).where(OrmScore.score_id == score_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _score_to_domain(row) if row else None

    async def get_current(self, user_id: UUID, asset_id: UUID) -> DomainScore | None:
        stmt = select(OrmScore).where(OrmScore.user_id == user_id, OrmScore.asset_id == asset_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _score_to_domain(row) if row else None

    async def list_current(self, user_id: UUID) -> list[DomainScore]:
        stmt = select(OrmScore).where(OrmScore.user_id == user_id).order_by(OrmScore.symbol)
        result = await self._session.execute(stmt)
        return [_score_to_domain(row) for row in result.scalars()]

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainScore]:
        stmt = select(OrmScore).order_by(OrmScore.calculated_at.desc()).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [_score_to_domain(row) for row in result.scalars()]

    async def save(self, score: DomainScore) -> DomainScore:
        values = {
            "score_id": score.score_id,
            "user_id": score.user_id,
            "asset_id": score.asset_id,
            "symbol": score.symbol,
            "criteria_version_id": score.criteria_version_id,
            "score": score.score,
            "breakdown": [r.model_dump(mode="json") for r in score.breakdown],
            "correlation_id": score.correlation_id,
            "calculated_at": score.calculated_at,
        }
        stmt = pg_insert(OrmScore).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "asset_id"],
            set_={
                "score_id": stmt.excluded.score_id,
                "symbol": stmt.excluded.symbol,
                "criteria_version_id": stmt.excluded.criteria_version_id,
                "score": stmt.excluded.score,
                "breakdown": stmt.excluded.breakdown,
                "correlation_id": stmt.excluded.correlation_id,
                "calculated_at": stmt.excluded.calculated_at,
            },
        )
        async with self._session.begin_nested():
            await self._session.execute(stmt)
        return score

    async def append_history(self, entry: DomainHistory) -> DomainHistory:
        row = OrmHistory(
            history_id=entry.history_id,
            user_id=entry.user_id,
            asset_id=entry.asset_id,
            symbol=entry.symbol,
            criteria_version_id=entry.criteria_version_id,
            score=entry.score,
            calculated_at=entry.calculated_at,
        )
        async with self._session.begin_nested():
            self._session.add(row)
            await self._session.flush()
        return entry

    async def list_history(
        self,
        user_id: UUID,
        asset_id: UUID,
        since: datetime | None = None,
    ) -> list[DomainHistory]:
        stmt = select(OrmHistory).where(
            OrmHistory.user_id == user_id, OrmHistory.asset_id == asset_id
        )
        if since is not None:
            stmt = stmt.where(OrmHistory.calculated_at >= since)
        stmt = stmt.order_by(OrmHistory.calculated_at.asc())
        result = await self._session.execute(stmt)
        return [_history_to_domain(row) for row in result.scalars()]

    async def get_history_at(
        self, user_id: UUID, asset_id: UUID, at: datetime
    ) -> DomainHistory | None:
        stmt = (
            select(OrmHistory)
            .where(
                OrmHistory.user_id == user_id,
                OrmHistory.asset_id == asset_id,
                OrmHistory.calculated_at <= at,
            )
            .order_by(OrmHistory.calculated_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _history_to_domain(row) if row else None

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("Asset scores are replaced on recalculation, not deleted")
