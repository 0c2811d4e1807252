"""Score repository interface."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from uuid import UUID

from src.domain.models.scores import AssetScore, ScoreHistoryEntry

from .base import Repository


class ScoreRepository(Repository[AssetScore]):
    """Current scores plus the append-only score history.

    save() upserts the single current score per (user, asset).  History rows
    are only ever appended; a recalculation adds a row and never rewrites one.
    """

    async def get(self, id: UUID) -> AssetScore | None:
        return await self.get_by_id(id)

    async def create(self, entity: AssetScore) -> AssetScore:
        return await self.save(entity)

    async def update(self, entity: AssetScore) -> AssetScore:
        return await self.save(entity)

    @abstractmethod
    async def get_by_id(self, score_id: UUID) -> AssetScore | None:
        """Return the score with its breakdown, or None."""

    @abstractmethod
    async def get_current(self, user_id: UUID, asset_id: UUID) -> AssetScore | None:
        """Return the user's current score for the asset, or None."""

    @abstractmethod
    async def list_current(self, user_id: UUID) -> list[AssetScore]:
        """Return every current score the user owns."""

    @abstractmethod
    async def save(self, score: AssetScore) -> AssetScore:
        """Insert or replace the current score for (user_id, asset_id).

        A failure raises here and leaves the session usable for later writes.
        """

    @abstractmethod
    async def append_history(self, entry: ScoreHistoryEntry) -> ScoreHistoryEntry:
        """Append one history row; flushed immediately, failing like save()."""

    @abstractmethod
    async def list_history(
        self,
        user_id: UUID,
        asset_id: UUID,
        since: datetime | None = None,
    ) -> list[ScoreHistoryEntry]:
        """Return history rows in ascending calculated_at order."""

    @abstractmethod
    async def get_history_at(
        self, user_id: UUID, asset_id: UUID, at: datetime
    ) -> ScoreHistoryEntry | None:
        """Return the latest history row calculated at or before ``at``."""
