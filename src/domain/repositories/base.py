"""Generic repository base interface.

Repository[T] is the CRUD root for the planner's aggregates: criteria
versions, current asset scores, portfolios, asset classes and
recommendations.  SQLAlchemy implementations live in
src/infrastructure/persistence/repositories/ and are bound to a session by
get_repositories().

Notes:
  - Every method is async; implementations run on SQLAlchemy's asyncio
    extension over asyncpg.
  - T is always a frozen pydantic domain model, never an ORM row.
  - Queries scoped to a user are declared on the specialised interfaces;
    list() here only pages.
  - Criteria versions and recommendations are never rewritten in place.
    Their implementations reject update()/delete() or restrict update() to
    the single mutable flag.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Async CRUD interface for one domain aggregate."""

    @abstractmethod
    async def get(self, id: UUID) -> T | None:
        """Return the aggregate with this id, or None."""

    @abstractmethod
    async def list(self, limit: int = 50, offset: int = 0) -> list[T]:
        """Return one page, newest first."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Persist a new aggregate and return it."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Persist changes to an existing aggregate and return it."""

    @abstractmethod
    async def delete(self, id: UUID) -> None:
        """Remove the aggregate with this id."""
