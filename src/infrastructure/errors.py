"""Classification of database failures.

Connection loss and timeouts are surfaced with their own error codes so a
client can tell "the backend is unavailable, retry later" apart from "the
request was invalid".  Classification looks at the SQLSTATE carried by the
driver exception (asyncpg exposes it as ``sqlstate``) and falls back to the
SQLAlchemy exception type.

    class 08          connection exception
    57P01..57P03      admin shutdown / crash shutdown / cannot connect now
    57014             query canceled (statement_timeout)
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from src.domain.errors import DatabaseTimeout, DatabaseUnavailable, DomainError

_CONNECTION_STATES = {"57P01", "57P02", "57P03"}
_TIMEOUT_STATES = {"57014"}


def _sqlstate(exc: BaseException) -> str | None:
    candidates = [exc, getattr(exc, "orig", None), getattr(exc, "__cause__", None)]
    for candidate in candidates:
        if candidate is None:
            continue
        state = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if isinstance(state, str):
            return state
    return None


def is_connection_error(exc: BaseException) -> bool:
    state = _sqlstate(exc)
    if state is not None:
        return state.startswith("08") or state in _CONNECTION_STATES
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (InterfaceError, ConnectionError, OSError))


def is_timeout(exc: BaseException) -> bool:
    state = _sqlstate(exc)
    if state is not None:
        return state in _TIMEOUT_STATES
    return isinstance(exc, (PoolTimeoutError, asyncio.TimeoutError, TimeoutError))


def classify_database_error(exc: BaseException) -> DomainError | None:
    """Map a driver/SQLAlchemy failure to a retryable domain error, if it is one."""
    if is_timeout(exc):
        return DatabaseTimeout()
    if is_connection_error(exc):
        return DatabaseUnavailable()
    if isinstance(exc, OperationalError) and _sqlstate(exc) is None:
        return DatabaseUnavailable()
    return None
