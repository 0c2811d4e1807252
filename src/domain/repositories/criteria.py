"""Criteria repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from src.domain.models.criteria import CriteriaVersion

from .base import Repository


class CriteriaRepository(Repository[CriteriaVersion]):
    """Read/write interface for CriteriaVersion aggregates.

    A version's criteria never change after creation.  update() persists only
    the is_active flag (soft delete / supersession); delete() is unsupported
    because score history references versions with ON DELETE RESTRICT.
    """

    async def get(self, id: UUID) -> CriteriaVersion | None:
        return await self.get_by_id(id)

    async def get_active(
        self, user_id: UUID, target_market: str | None = None
    ) -> CriteriaVersion | None:
        """Return the newest active version for the user, or None."""
        versions = await self.list_for_user(user_id, target_market=target_market)
        return versions[0] if versions else None

    @abstractmethod
    async def get_by_id(self, version_id: UUID) -> CriteriaVersion | None:
        """Return the version with its embedded criteria, or None."""

    @abstractmethod
    async def list_for_user(
        self,
        user_id: UUID,
        target_market: str | None = None,
        active_only: bool = True,
    ) -> list[CriteriaVersion]:
        """Return the user's versions ordered by created_at descending."""

    @abstractmethod
    async def count_active(self, user_id: UUID) -> int:
        """Return the number of active criteria sets the user owns."""

    @abstractmethod
    async def create(self, entity: CriteriaVersion) -> CriteriaVersion:
        """Persist a version and all its criteria atomically."""

    @abstractmethod
    async def update(self, entity: CriteriaVersion) -> CriteriaVersion:
        """Persist the version's is_active flag."""
