"""Recommendation repository interface."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from uuid import UUID

from src.domain.models.recommendations import Recommendation

from .base import Repository


class RecommendationRepository(Repository[Recommendation]):
    """Read/write interface for Recommendation aggregates (with items).

    Recommendations are immutable apart from confirmation, which goes
    through mark_confirmed() so the already-confirmed check and the status
    change happen in one statement.
    """

    async def get(self, id: UUID) -> Recommendation | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, recommendation_id: UUID) -> Recommendation | None:
        """Return the recommendation with its items, or None."""

    @abstractmethod
    async def get_latest_for_user(self, user_id: UUID) -> Recommendation | None:
        """Return the user's most recently generated recommendation, or None."""

    @abstractmethod
    async def create(self, entity: Recommendation) -> Recommendation:
        """Persist the recommendation and all its items atomically."""

    @abstractmethod
    async def mark_confirmed(self, recommendation_id: UUID, confirmed_at: datetime) -> bool:
        """Flip a pending recommendation to confirmed.

        Returns False (and changes nothing) when it was already confirmed.
        """
