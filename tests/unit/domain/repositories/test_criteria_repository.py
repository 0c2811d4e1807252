"""Tests for src/domain/repositories/criteria.py."""

import asyncio
from uuid import uuid4

import pytest

from src.domain.repositories.criteria import CriteriaRepository


def _concrete(versions=None) -> CriteriaRepository:
    class _Impl(CriteriaRepository):
        def __init__(self):
            self.calls = []

        async def get_by_id(self, version_id): return "found"
        async def list_for_user(self, user_id, target_market=None, active_only=True):
            self.calls.append(target_market)
            return list(versions or [])
        async def count_active(self, user_id): return len(versions or [])
        async def list(self, limit=50, offset=0): return []
        async def create(self, entity): return entity
        async def update(self, entity): return entity
        async def delete(self, id): return None

    return _Impl()


def test_criteria_repository_is_abstract():
    with pytest.raises(TypeError):
        CriteriaRepository()  # type: ignore[abstract]


def test_criteria_repository_get_delegates_to_get_by_id():
    assert asyncio.run(_concrete().get(uuid4())) == "found"


def test_get_active_returns_newest_version():
    assert asyncio.run(_concrete(["newest", "older"]).get_active(uuid4())) == "newest"


def test_get_active_returns_none_without_versions():
    assert asyncio.run(_concrete([]).get_active(uuid4())) is None


def test_get_active_passes_target_market():
    repo = _concrete(["v"])
    asyncio.run(repo.get_active(uuid4(), target_market="BR"))
    assert repo.calls == ["BR"]
