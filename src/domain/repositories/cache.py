"""Recommendation cache interface.

The cache is pure memoization keyed by user id.  It never decides whether a
recommendation is still valid: callers check Recommendation.expires_at.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.models.recommendations import Recommendation


class RecommendationCache(ABC):
    @abstractmethod
    async def get(self, user_id: UUID) -> Recommendation | None:
        """Return the memoized recommendation, or None."""

    @abstractmethod
    async def set(self, recommendation: Recommendation, ttl_seconds: int) -> None:
        """Memoize the recommendation under its user id."""

    @abstractmethod
    async def invalidate_user(self, user_id: UUID) -> None:
        """Drop the user's cached recommendation, portfolio and allocation entries."""
