"""SQLAlchemy implementation of ExchangeRateRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.models.exchange import ExchangeRate as DomainRate
from src.domain.repositories.exchange_rates import ExchangeRateRepository
from src.infrastructure.persistence.models.exchange import ExchangeRate as OrmRate


def _rate_to_domain(row: OrmRate) -> DomainRate:
    return DomainRate(
        rate_id=row.rate_id,
        base_currency=row.base_currency,
        quote_currency=row.quote_currency,
        rate=row.rate,
        rate_date=row.rate_date,
        source=row.source,
        fetched_at=row.fetched_at,
    )


class SqlExchangeRateRepository(ExchangeRateRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_rate(
        self, base_currency: str, quote_currency: str, at: datetime
    ) -> DomainRate | None:
        stmt = (
            select(OrmRate)
            .where(
                OrmRate.base_currency == base_currency.upper(),
                OrmRate.quote_currency == quote_currency.upper(),
                OrmRate.rate_date <= at,
            )
            .order_by(OrmRate.rate_date.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _rate_to_domain(row) if row else None

    async def add_many(self, rates: list[DomainRate]) -> int:
        if not rates:
            return 0
        values = [
            {
                "rate_id": r.rate_id,
                "base_currency": r.base_currency,
                "quote_currency": r.quote_currency,
                "rate": r.rate,
                "rate_date": r.rate_date,
                "source": r.source,
                "fetched_at": r.fetched_at,
            }
            for r in rates
        ]
        stmt = pg_insert(OrmRate).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["base_currency", "quote_currency", "rate_date"],
            set_={
                "rate": stmt.excluded.rate,
                "source": stmt.excluded.source,
                "fetched_at": stmt.excluded.fetched_at,
            },
        )
        result = await self._session.execute(stmt)
        return result.rowcount
