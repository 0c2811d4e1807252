"""Criteria layer ORM model: criteria_versions."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base


class CriteriaVersion(Base):
    """Immutable, versioned criteria set owned by a user.

    criteria is a JSONB array of criterion objects in display order; it is
    written once at insert and never updated.  Rows are soft-deleted via
    is_active because score_history references them with ON DELETE RESTRICT.
    """

    __tablename__ = "criteria_versions"
    __table_args__ = (
        CheckConstraint("version >= 1", name="ck_criteria_versions_version_positive"),
        Index("ix_criteria_versions_user_active", "user_id", "is_active"),
    )

    version_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    target_market: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # [{"criterion_id": ..., "name": ..., "metric_key": ..., "operator": "gte",
    #   "threshold": "20", "threshold_max": null, "points": 10}, ...]
    criteria: Mapped[list] = mapped_column(JSONB, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
