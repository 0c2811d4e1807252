"""Tests for CriteriaService versioning, copying and soft deletion."""

from uuid import uuid4

import pytest

from src.domain.errors import CriteriaNotFound, LimitExceededError, ValidationError
from src.domain.models.criteria import CriteriaVersion, Criterion
from src.domain.models.enums import Operator
from src.domain.repositories.criteria import CriteriaRepository
from src.domain.services.criteria import (
    MAX_CRITERIA_PER_SET,
    MAX_CRITERIA_SETS_PER_USER,
    CriteriaService,
)

USER = uuid4()


class _Criteria(CriteriaRepository):
    def __init__(self):
        self.versions = {}

    async def get_by_id(self, version_id):
        return self.versions.get(version_id)

    async def list_for_user(self, user_id, target_market=None, active_only=True):
        found = [
            v
            for v in self.versions.values()
            if v.user_id == user_id
            and (not active_only or v.is_active)
            and (target_market is None or v.target_market == target_market)
        ]
        return sorted(found, key=lambda v: v.created_at, reverse=True)

    async def count_active(self, user_id):
        return len(await self.list_for_user(user_id))

    async def list(self, limit=50, offset=0):
        return list(self.versions.values())

    async def create(self, entity):
        self.versions[entity.version_id] = entity
        return entity

    async def update(self, entity):
        self.versions[entity.version_id] = entity
        return entity

    async def delete(self, id):
        raise NotImplementedError


def _rules(n=1):
    return [
        Criterion(name=f"rule {i}", metric_key="pe_ratio", operator=Operator.LTE, threshold="20", points=5)
        for i in range(n)
    ]


@pytest.fixture
def repo():
    return _Criteria()


@pytest.fixture
def svc(repo):
    return CriteriaService(repo)


# --- create ---


async def test_create_starts_at_version_one(svc):
    rules = _rules(2)
    version = await svc.create(USER, "Value", "BR", rules)
    assert version.version == 1
    assert version.is_active
    assert {c.criterion_id for c in version.criteria}.isdisjoint({c.criterion_id for c in rules})


async def test_create_requires_a_criterion(svc):
    with pytest.raises(ValidationError):
        await svc.create(USER, "Empty", "BR", [])


async def test_create_caps_criteria_per_set(svc):
    with pytest.raises(LimitExceededError):
        await svc.create(USER, "Huge", "BR", _rules(MAX_CRITERIA_PER_SET + 1))


async def test_create_caps_sets_per_user(svc, repo):
    for i in range(MAX_CRITERIA_SETS_PER_USER):
        await repo.create(CriteriaVersion(user_id=USER, name=f"set {i}", target_market="BR", criteria=_rules()))
    with pytest.raises(LimitExceededError) as exc:
        await svc.create(USER, "One more", "BR", _rules())
    assert exc.value.details["limit"] == MAX_CRITERIA_SETS_PER_USER


# --- update ---


async def test_update_creates_successor_and_deactivates(svc, repo):
    original = await svc.create(USER, "Value", "BR", _rules())
    successor = await svc.update(USER, original.version_id, criteria=_rules(3))

    assert successor.version == 2
    assert successor.version_id != original.version_id
    assert len(successor.criteria) == 3
    assert repo.versions[original.version_id].is_active is False
    assert len(repo.versions[original.version_id].criteria) == 1


async def test_update_rename_keeps_criteria(svc):
    original = await svc.create(USER, "Value", "BR", _rules(2))
    successor = await svc.update(USER, original.version_id, name="Deep value")
    assert successor.name == "Deep value"
    assert [c.name for c in successor.criteria] == [c.name for c in original.criteria]


async def test_update_superseded_version_not_found(svc):
    original = await svc.create(USER, "Value", "BR", _rules())
    await svc.update(USER, original.version_id, name="v2")
    with pytest.raises(CriteriaNotFound):
        await svc.update(USER, original.version_id, name="v3")


async def test_update_other_users_set(svc):
    original = await svc.create(USER, "Value", "BR", _rules())
    with pytest.raises(CriteriaNotFound):
        await svc.update(uuid4(), original.version_id, name="Mine now")


# --- copy / delete / list ---


async def test_copy_is_independent(svc, repo):
    source = await svc.create(USER, "Value", "BR", _rules())
    copied = await svc.copy(USER, source.version_id, target_market="US")
    assert copied.name == "Value (Copy)"
    assert copied.target_market == "US"
    assert copied.version == 1
    assert repo.versions[source.version_id].is_active


async def test_delete_is_soft(svc, repo):
    version = await svc.create(USER, "Value", "BR", _rules())
    await svc.delete(USER, version.version_id)
    assert version.version_id in repo.versions
    with pytest.raises(CriteriaNotFound):
        await svc.get(USER, version.version_id)


async def test_list_active_by_market(svc):
    await svc.create(USER, "Value", "BR", _rules())
    us = await svc.create(USER, "Growth", "US", _rules())
    assert [v.version_id for v in await svc.list_active(USER, target_market="US")] == [us.version_id]
