"""Shared column types for decimal money, quantity and percentage columns."""

from sqlalchemy import Numeric

Money = Numeric(20, 4)
Quantity = Numeric(28, 8)
Percent = Numeric(9, 4)
Rate = Numeric(24, 12)
ScoreValue = Numeric(12, 4)
