"""SQLAlchemy implementation of AuditLog."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.models.audit import CalculationEvent as DomainEvent
from src.domain.models.enums import CalculationEventType
from src.domain.repositories.audit import AuditLog
from src.infrastructure.persistence.models.audit import CalculationEvent as OrmEvent


def _event_to_domain(row: OrmEvent) -> DomainEvent:
    return DomainEvent(
        event_id=row.event_id,
        correlation_id=row.correlation_id,
        user_id=row.user_id,
        event_type=CalculationEventType(row.event_type),
        payload=row.payload,
        created_at=row.created_at,
    )


class SqlAuditLog(AuditLog):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, event: DomainEvent) -> None:
        self._session.add(
            OrmEvent(
                event_id=event.event_id,
                correlation_id=event.correlation_id,
                user_id=event.user_id,
                event_type=event.event_type.value,
                payload=event.payload,
                created_at=event.created_at,
            )
        )

    async def list_for_correlation(self, correlation_id: UUID) -> list[DomainEvent]:
        stmt = (
            select(OrmEvent)
            .where(OrmEvent.correlation_id == correlation_id)
            .order_by(OrmEvent.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [_event_to_domain(row) for row in result.scalars()]
