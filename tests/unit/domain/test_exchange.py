"""Tests for src/domain/models/exchange.py."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.domain.models.exchange import ExchangeRate, currency_precision


def test_currency_codes_are_upper_cased():
    rate = ExchangeRate(
        base_currency="usd",
        quote_currency="brl",
        rate="5.1",
        rate_date=datetime.now(timezone.utc),
        source="ecb",
    )
    assert (rate.base_currency, rate.quote_currency) == ("USD", "BRL")


def test_rate_must_be_positive():
    with pytest.raises(ValidationError):
        ExchangeRate(
            base_currency="USD",
            quote_currency="BRL",
            rate="0",
            rate_date=datetime.now(timezone.utc),
            source="ecb",
        )


def test_jpy_has_no_fractional_digits():
    assert currency_precision("jpy") == 0


def test_default_precision_is_two():
    assert currency_precision("EUR") == 2
