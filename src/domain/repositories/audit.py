"""Calculation audit-log interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.models.audit import CalculationEvent


class AuditLog(ABC):
    """Append-only store of calculation events."""

    @abstractmethod
    async def record(self, event: CalculationEvent) -> None:
        """Append one event."""

    @abstractmethod
    async def list_for_correlation(self, correlation_id: UUID) -> list[CalculationEvent]:
        """Return every event of one logical operation in creation order."""
