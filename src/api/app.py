"""API application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.infrastructure.cache import create_redis_client
from src.infrastructure.config import settings

from .errors import register_exception_handlers
from .routes import criteria, data, recommendations, scores

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis = create_redis_client(settings.redis_url)
    yield
    await app.state.redis.aclose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Portfolio Planner", lifespan=lifespan)
    register_exception_handlers(app)
    for module in (scores, recommendations, criteria, data):
        app.include_router(module.router, prefix="/api")
    logger.info("API ready")
    return app
