"""Tests for SqlScoreRepository: mapping, savepoint-scoped writes and delete guard."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, PendingRollbackError

from src.domain.models.criteria import CriteriaVersion, Criterion
from src.domain.models.enums import CalculationEventType, SkippedReason
from src.domain.models.scores import Fundamentals, ScoreHistoryEntry, ScoringAsset
from src.domain.repositories.audit import AuditLog
from src.domain.repositories.criteria import CriteriaRepository
from src.domain.services.scoring import ScoringService
from src.infrastructure.persistence.repositories.scores import (
    SqlScoreRepository,
    _history_to_domain,
    _score_to_domain,
)

USER = uuid4()


def _orm_score(**overrides):
    defaults = {
        "score_id": uuid4(),
        "user_id": uuid4(),
        "asset_id": uuid4(),
        "symbol": "ITSA4",
        "criteria_version_id": uuid4(),
        "score": Decimal("15.0000"),
        "breakdown": [
            {
                "criterion_id": str(uuid4()),
                "criterion_name": "Low P/E",
                "matched": True,
                "points_awarded": 15,
                "actual_value": "8.2",
                "skipped_reason": None,
            },
            {
                "criterion_id": str(uuid4()),
                "criterion_name": "Yield",
                "matched": False,
                "points_awarded": 0,
                "actual_value": None,
                "skipped_reason": "missing_fundamental",
            },
        ],
        "correlation_id": uuid4(),
        "calculated_at": datetime.now(timezone.utc),
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# --- mapping ---

def test_score_to_domain_maps_score():
    assert _score_to_domain(_orm_score()).score == Decimal("15")


def test_score_to_domain_parses_breakdown():
    result = _score_to_domain(_orm_score())
    assert result.breakdown[0].matched is True
    assert result.breakdown[1].skipped_reason is SkippedReason.MISSING_FUNDAMENTAL


def test_history_to_domain():
    row = SimpleNamespace(
        history_id=uuid4(),
        user_id=uuid4(),
        asset_id=uuid4(),
        symbol="WEGE3",
        criteria_version_id=uuid4(),
        score=Decimal("40"),
        calculated_at=datetime.now(timezone.utc),
    )
    assert _history_to_domain(row).symbol == "WEGE3"


# --- writes ---

def _session(calls=None):
    """MagicMock session whose begin_nested() is an async context manager."""
    calls = [] if calls is None else calls
    session = MagicMock()
    savepoint = session.begin_nested.return_value
    savepoint.__aenter__.side_effect = lambda *a: calls.append("savepoint")
    savepoint.__aexit__.return_value = False
    session.execute = AsyncMock(side_effect=lambda *a, **k: calls.append("execute"))
    session.flush = AsyncMock(side_effect=lambda *a, **k: calls.append("flush"))
    session.add = MagicMock(side_effect=lambda *a: calls.append("add"))
    return session


def _entry():
    return ScoreHistoryEntry(
        user_id=uuid4(),
        asset_id=uuid4(),
        symbol="X",
        criteria_version_id=uuid4(),
        score="12",
        calculated_at=datetime.now(timezone.utc),
    )


async def test_save_runs_upsert_inside_savepoint():
    calls = []
    session = _session(calls)
    score = _score_to_domain(_orm_score())
    assert await SqlScoreRepository(session).save(score) == score
    assert calls == ["savepoint", "execute"]


async def test_append_history_flushes_inside_savepoint():
    calls = []
    session = _session(calls)
    entry = _entry()
    await SqlScoreRepository(session).append_history(entry)
    assert calls == ["savepoint", "add", "flush"]
    (row,) = session.add.call_args.args
    assert row.history_id == entry.history_id
    assert row.score == Decimal("12")


async def test_failed_upsert_rolls_back_only_its_savepoint():
    session = _session()
    session.execute.side_effect = [IntegrityError("insert", {}, Exception("fk")), None]
    repo = SqlScoreRepository(session)

    with pytest.raises(IntegrityError):
        await repo.save(_score_to_domain(_orm_score()))
    exc_type = session.begin_nested.return_value.__aexit__.await_args.args[0]
    assert exc_type is IntegrityError

    await repo.save(_score_to_domain(_orm_score()))
    assert session.begin_nested.call_count == 2
    session.commit.assert_not_called()
    session.rollback.assert_not_called()


async def test_failed_history_insert_raises_from_append():
    session = _session()
    session.flush.side_effect = IntegrityError("insert", {}, Exception("fk"))

    with pytest.raises(IntegrityError):
        await SqlScoreRepository(session).append_history(_entry())
    exc_type = session.begin_nested.return_value.__aexit__.await_args.args[0]
    assert exc_type is IntegrityError


# --- batch isolation over an aborting transaction ---

class _AbortingSession:
    """Postgres-like session: after a failed statement every further
    statement fails until the enclosing savepoint is rolled back."""

    def __init__(self, fail_on):
        self.fail_on = set(fail_on)
        self.statements = 0
        self.aborted = False

    def begin_nested(self):
        return _Savepoint(self)

    def add(self, row):
        pass

    async def execute(self, stmt):
        self._run()

    async def flush(self):
        self._run()

    def _run(self):
        if self.aborted:
            raise PendingRollbackError("current transaction is aborted")
        self.statements += 1
        if self.statements in self.fail_on:
            self.aborted = True
            raise IntegrityError("insert", {}, Exception("constraint"))


class _Savepoint:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.session.aborted = False
        return False


def _scoring(session):
    version = CriteriaVersion.create(
        USER,
        "Value",
        "BR",
        [Criterion(name="Low P/E", metric_key="pe_ratio", operator="lte", threshold="20", points=10)],
    )
    criteria = AsyncMock(spec=CriteriaRepository)
    criteria.get_active.return_value = version
    audit = AsyncMock(spec=AuditLog)
    return ScoringService(criteria, SqlScoreRepository(session), audit), audit


def _assets():
    return [
        ScoringAsset(asset_id=uuid4(), symbol=s, fundamentals=Fundamentals(metrics={"pe_ratio": "8"}))
        for s in ("ITSA4", "WEGE3")
    ]


async def test_failed_upsert_leaves_rest_of_batch_persisted():
    svc, audit = _scoring(_AbortingSession(fail_on={1}))
    first, second = _assets()

    run = await svc.calculate_scores(USER, [first, second])

    assert run.failed_assets == [first.asset_id]
    assert [s.symbol for s in run.scores] == ["WEGE3"]
    assert [e.args[0].event_type for e in audit.record.await_args_list][-1] is (
        CalculationEventType.CALC_COMPLETED
    )


async def test_failed_history_insert_keeps_score_and_batch():
    # statement 2 is the first asset's history insert
    svc, audit = _scoring(_AbortingSession(fail_on={2}))

    run = await svc.calculate_scores(USER, _assets())

    assert run.failed_assets == []
    assert len(run.scores) == 2
    assert audit.record.await_count == 4


async def test_delete_raises():
    with pytest.raises(NotImplementedError):
        await SqlScoreRepository(AsyncMock()).delete(uuid4())
