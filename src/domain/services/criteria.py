"""Criteria-set management: creation, versioning, copying, soft deletion.

Versions are never edited in place.  update() creates the successor
version and deactivates the old one, so scores already calculated against
the old version keep pointing at exactly the rules that produced them.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.domain.errors import CriteriaNotFound, LimitExceededError, ValidationError
from src.domain.models.criteria import CriteriaVersion, Criterion
from src.domain.repositories.criteria import CriteriaRepository

logger = logging.getLogger(__name__)

MAX_CRITERIA_SETS_PER_USER = 50
MAX_CRITERIA_PER_SET = 50


def _check_criteria(criteria: list[Criterion]) -> None:
    if not criteria:
        raise ValidationError("A criteria set needs at least one criterion")
    if len(criteria) > MAX_CRITERIA_PER_SET:
        raise LimitExceededError(
            f"Maximum of {MAX_CRITERIA_PER_SET} criteria per set",
            details={"limit": MAX_CRITERIA_PER_SET, "requested": len(criteria)},
        )


class CriteriaService:
    def __init__(self, criteria: CriteriaRepository) -> None:
        self._criteria = criteria

    async def list_active(
        self, user_id: UUID, target_market: str | None = None
    ) -> list[CriteriaVersion]:
        return await self._criteria.list_for_user(user_id, target_market=target_market)

    async def get(self, user_id: UUID, version_id: UUID) -> CriteriaVersion:
        """Return an active version owned by the user, else CriteriaNotFound."""
        version = await self._criteria.get_by_id(version_id)
        if version is None or version.user_id != user_id or not version.is_active:
            raise CriteriaNotFound(details={"criteriaVersionId": str(version_id)})
        return version

    async def create(
        self,
        user_id: UUID,
        name: str,
        target_market: str,
        criteria: list[Criterion],
    ) -> CriteriaVersion:
        _check_criteria(criteria)
        await self._check_set_limit(user_id)
        version = CriteriaVersion.create(user_id, name, target_market, criteria)
        created = await self._criteria.create(version)
        logger.info("Created criteria set %s (%d criteria)", created.version_id, len(criteria))
        return created

    async def update(
        self,
        user_id: UUID,
        version_id: UUID,
        criteria: list[Criterion] | None = None,
        name: str | None = None,
        target_market: str | None = None,
    ) -> CriteriaVersion:
        current = await self.get(user_id, version_id)
        if criteria is not None:
            _check_criteria(criteria)
        successor = current.next_version(criteria, name=name, target_market=target_market)
        await self._criteria.update(current.deactivated())
        created = await self._criteria.create(successor)
        logger.info(
            "Criteria set %s superseded by version %d (%s)",
            version_id,
            created.version,
            created.version_id,
        )
        return created

    async def copy(
        self,
        user_id: UUID,
        version_id: UUID,
        name: str | None = None,
        target_market: str | None = None,
    ) -> CriteriaVersion:
        source = await self.get(user_id, version_id)
        await self._check_set_limit(user_id)
        copied = await self._criteria.create(source.copy_as(name=name, target_market=target_market))
        logger.info("Copied criteria set %s to %s", version_id, copied.version_id)
        return copied

    async def delete(self, user_id: UUID, version_id: UUID) -> None:
        """Soft delete: the version stays for score history, inactive."""
        current = await self.get(user_id, version_id)
        await self._criteria.update(current.deactivated())
        logger.info("Deactivated criteria set %s", version_id)

    async def _check_set_limit(self, user_id: UUID) -> None:
        count = await self._criteria.count_active(user_id)
        if count >= MAX_CRITERIA_SETS_PER_USER:
            raise LimitExceededError(
                f"Maximum of {MAX_CRITERIA_SETS_PER_USER} criteria sets reached",
                details={"limit": MAX_CRITERIA_SETS_PER_USER, "current": count},
            )
