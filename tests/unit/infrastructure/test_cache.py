"""Unit tests for src/infrastructure/cache.py.

The Redis client is an AsyncMock; no server is required.
"""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError

from src.domain.models.recommendations import Recommendation
from src.infrastructure.cache import (
    RedisRecommendationCache,
    create_redis_client,
    recommendation_key,
    user_keys,
)

USER = uuid4()
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def _recommendation():
    return Recommendation(
        user_id=USER,
        portfolio_id=uuid4(),
        contribution="1000",
        dividends="25.50",
        total_investable="1025.50",
        base_currency="BRL",
        generated_at=NOW,
        expires_at=NOW + timedelta(hours=24),
    )


@pytest.fixture
def client():
    return AsyncMock()


@pytest.fixture
def cache(client):
    return RedisRecommendationCache(client)


# --- keys ---

def test_keys_are_namespaced_per_user():
    assert recommendation_key(USER) == f"recs:{USER}"
    assert user_keys(USER) == [f"recs:{USER}", f"portfolio:{USER}", f"allocation:{USER}"]


def test_create_redis_client_decodes_responses():
    client = create_redis_client("redis://localhost:6379/0")
    assert isinstance(client, redis.Redis)
    assert client.connection_pool.connection_kwargs["decode_responses"] is True


# --- get ---

async def test_get_round_trips_json(cache, client):
    rec = _recommendation()
    client.get.return_value = rec.model_dump_json()
    cached = await cache.get(USER)
    assert cached == rec
    client.get.assert_awaited_once_with(f"recs:{USER}")


async def test_get_miss(cache, client):
    client.get.return_value = None
    assert await cache.get(USER) is None


async def test_get_unreadable_entry_is_a_miss(cache, client, caplog):
    client.get.return_value = '{"not": "a recommendation"}'
    with caplog.at_level(logging.WARNING):
        assert await cache.get(USER) is None
    assert "unreadable" in caplog.text


async def test_get_redis_failure_is_a_miss(cache, client, caplog):
    client.get.side_effect = RedisConnectionError("down")
    with caplog.at_level(logging.WARNING):
        assert await cache.get(USER) is None
    assert "Cache get failed" in caplog.text


# --- set / invalidate ---

async def test_set_uses_ttl(cache, client):
    rec = _recommendation()
    await cache.set(rec, 3600)
    key, payload = client.set.await_args.args
    assert key == f"recs:{USER}"
    assert client.set.await_args.kwargs == {"ex": 3600}
    assert Recommendation.model_validate_json(payload).total_investable == rec.total_investable


async def test_set_failure_is_logged(cache, client, caplog):
    client.set.side_effect = RedisConnectionError("down")
    with caplog.at_level(logging.WARNING):
        await cache.set(_recommendation(), 60)
    assert "Cache set failed" in caplog.text


async def test_invalidate_drops_every_user_key(cache, client):
    await cache.invalidate_user(USER)
    client.delete.assert_awaited_once_with(*user_keys(USER))


async def test_invalidate_failure_is_logged(cache, client, caplog):
    client.delete.side_effect = RedisConnectionError("down")
    with caplog.at_level(logging.WARNING):
        await cache.invalidate_user(USER)
    assert "invalidation failed" in caplog.text
