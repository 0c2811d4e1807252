"""Calculation audit-trail model.

Every scoring and recommendation run appends events sharing one
correlation_id, so a whole batch can be replayed from its audit trail.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .enums import CalculationEventType


class CalculationEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    correlation_id: UUID
    user_id: UUID
    event_type: CalculationEventType
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
