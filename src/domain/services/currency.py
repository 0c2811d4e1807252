"""Currency conversion service.

Converts a decimal amount between two supported currencies using the most
recent stored rate at or before the requested date.  Lookup order:

    1. same currency      → rate 1, no lookup
    2. direct pair        → value * rate
    3. inverse pair       → value * (1 / rate)
    4. neither            → RateNotFoundError

A rate whose rate_date is older than the freshness window is still used;
the result is flagged is_stale_rate=True and a warning is logged.  The
converted value is rounded half-up to the target currency's display
precision (JPY 0 places, everything else 2).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from src.domain.errors import RateNotFoundError, UnsupportedCurrency, ValidationError
from src.domain.models.exchange import (
    SUPPORTED_CURRENCIES,
    ConversionResult,
    currency_precision,
)
from src.domain.models.numeric import (
    ONE,
    NumberLike,
    divide,
    is_negative,
    multiply,
    quantize,
    to_decimal,
)
from src.domain.repositories.exchange_rates import ExchangeRateRepository

logger = logging.getLogger(__name__)

SAME_CURRENCY_SOURCE = "same-currency"
_DEFAULT_STALE_AFTER = timedelta(hours=24)


def normalize_currency(code: str) -> str:
    """Upper-case and validate an ISO 4217 code against the supported set."""
    normalized = (code or "").strip().upper()
    if normalized not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrency(
            f"Unsupported currency: {code!r}",
            details={"supportedCurrencies": list(SUPPORTED_CURRENCIES)},
        )
    return normalized


class CurrencyConverter:
    def __init__(
        self,
        rates: ExchangeRateRepository,
        stale_after: timedelta = _DEFAULT_STALE_AFTER,
    ) -> None:
        self._rates = rates
        self._stale_after = stale_after

    async def convert(
        self,
        value: NumberLike,
        from_currency: str,
        to_currency: str,
        rate_date: datetime | None = None,
        correlation_id: UUID | None = None,
        now: datetime | None = None,
    ) -> ConversionResult:
        amount = to_decimal(value)
        if is_negative(amount):
            raise ValidationError("Cannot convert a negative value", details={"value": str(value)})

        source = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        now = now or datetime.now(timezone.utc)
        at = rate_date or now
        correlation_id = correlation_id or uuid4()
        places = currency_precision(target)

        if source == target:
            return ConversionResult(
                value=quantize(amount, places),
                from_currency=source,
                to_currency=target,
                rate=ONE,
                rate_date=at,
                rate_source=SAME_CURRENCY_SOURCE,
                is_stale_rate=False,
                correlation_id=correlation_id,
            )

        stored = await self._rates.find_rate(source, target, at)
        if stored is not None:
            rate = stored.rate
        else:
            stored = await self._rates.find_rate(target, source, at)
            if stored is None:
                raise RateNotFoundError(
                    f"No exchange rate found for {source} to {target}",
                    details={"from": source, "to": target, "rateDate": at.isoformat()},
                )
            rate = divide(ONE, stored.rate)

        is_stale = now - stored.rate_date > self._stale_after
        if is_stale:
            logger.warning(
                "Using stale exchange rate %s/%s from %s",
                stored.base_currency,
                stored.quote_currency,
                stored.rate_date.isoformat(),
                extra={"correlation_id": str(correlation_id)},
            )

        converted = quantize(multiply(amount, rate), places)
        logger.info(
            "Currency conversion completed: %s %s -> %s %s (rate %s, source %s)",
            amount,
            source,
            converted,
            target,
            rate,
            stored.source,
            extra={"correlation_id": str(correlation_id)},
        )
        return ConversionResult(
            value=converted,
            from_currency=source,
            to_currency=target,
            rate=rate,
            rate_date=stored.rate_date,
            rate_source=stored.source,
            is_stale_rate=is_stale,
            correlation_id=correlation_id,
        )

    async def convert_batch(
        self,
        items: list[tuple[NumberLike, str]],
        to_currency: str,
        rate_date: datetime | None = None,
        now: datetime | None = None,
    ) -> list[ConversionResult]:
        """Convert (value, from_currency) pairs into one target currency.

        All conversions in the batch share a correlation id.  The first
        failure propagates; partial results are not returned.
        """
        correlation_id = uuid4()
        return [
            await self.convert(
                value,
                from_currency,
                to_currency,
                rate_date=rate_date,
                correlation_id=correlation_id,
                now=now,
            )
            for value, from_currency in items
        ]
