"""Exchange-rate and currency-conversion domain models."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .numeric import DecimalStr

SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "EUR", "GBP", "BRL", "CAD", "AUD", "JPY", "CHF")

# Display precision (fractional digits) per currency; anything absent uses 2.
CURRENCY_PRECISION: dict[str, int] = {"JPY": 0}
DEFAULT_CURRENCY_PRECISION = 2


def currency_precision(currency: str) -> int:
    return CURRENCY_PRECISION.get(currency.upper(), DEFAULT_CURRENCY_PRECISION)


class ExchangeRate(BaseModel):
    """Stored quote: 1 unit of base_currency = rate units of quote_currency."""

    model_config = ConfigDict(frozen=True)

    rate_id: UUID = Field(default_factory=uuid4)
    base_currency: str = Field(min_length=3, max_length=3)
    quote_currency: str = Field(min_length=3, max_length=3)
    rate: DecimalStr = Field(gt=0)
    rate_date: datetime
    source: str
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("base_currency", "quote_currency")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class ConversionResult(BaseModel):
    """Outcome of one conversion.

    is_stale_rate flags a rate older than the freshness threshold; the
    conversion still succeeds.
    """

    model_config = ConfigDict(frozen=True)

    value: DecimalStr
    from_currency: str
    to_currency: str
    rate: DecimalStr
    rate_date: datetime
    rate_source: str
    is_stale_rate: bool = False
    correlation_id: UUID
