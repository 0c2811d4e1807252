"""Redis-backed recommendation cache.

Keys are namespaced per user:
    recs:{user_id}        serialized Recommendation (TTL = recommendation expiry)
    portfolio:{user_id}   portfolio views cached by the UI layer
    allocation:{user_id}  allocation summaries cached by the UI layer

Cache failures are logged and treated as misses; the database stays the
source of truth.
"""

from __future__ import annotations

import logging
from uuid import UUID

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from src.domain.models.recommendations import Recommendation
from src.domain.repositories.cache import RecommendationCache

logger = logging.getLogger(__name__)


def recommendation_key(user_id: UUID) -> str:
    return f"recs:{user_id}"


def user_keys(user_id: UUID) -> list[str]:
    return [recommendation_key(user_id), f"portfolio:{user_id}", f"allocation:{user_id}"]


def create_redis_client(url: str) -> redis.Redis:
    return redis.from_url(url, decode_responses=True)


class RedisRecommendationCache(RecommendationCache):
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def get(self, user_id: UUID) -> Recommendation | None:
        key = recommendation_key(user_id)
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            logger.warning("Cache get failed for %s: %s", key, exc)
            return None
        if raw is None:
            logger.debug("Cache miss: %s", key)
            return None
        try:
            return Recommendation.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    async def set(self, recommendation: Recommendation, ttl_seconds: int) -> None:
        key = recommendation_key(recommendation.user_id)
        try:
            await self._client.set(key, recommendation.model_dump_json(), ex=ttl_seconds)
            logger.debug("Cache set: %s, TTL: %ss", key, ttl_seconds)
        except RedisError as exc:
            logger.warning("Cache set failed for %s: %s", key, exc)

    async def invalidate_user(self, user_id: UUID) -> None:
        keys = user_keys(user_id)
        try:
            await self._client.delete(*keys)
        except RedisError as exc:
            logger.warning("Cache invalidation failed for user %s: %s", user_id, exc)
