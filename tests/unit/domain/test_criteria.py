"""Tests for src/domain/models/criteria.py."""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.domain.models.criteria import CriteriaVersion, Criterion
from src.domain.models.enums import Operator


def _criterion(**overrides) -> Criterion:
    defaults = {
        "name": "High ROE",
        "metric_key": "roe",
        "operator": Operator.GTE,
        "threshold": "20",
        "points": 10,
    }
    defaults.update(overrides)
    return Criterion(**defaults)


def _version(**overrides) -> CriteriaVersion:
    defaults = {
        "user_id": uuid4(),
        "name": "Brazil quality",
        "target_market": "BR",
        "criteria": [_criterion(), _criterion(name="Cheap", metric_key="pe", operator=Operator.LTE, threshold="10", points=5)],
    }
    defaults.update(overrides)
    return CriteriaVersion(**defaults)


# --- Criterion validation ---

def test_threshold_is_parsed_to_decimal():
    assert _criterion().threshold == Decimal("20")


def test_comparison_operator_requires_threshold():
    with pytest.raises(ValidationError):
        _criterion(threshold=None)


def test_exists_needs_no_threshold():
    assert _criterion(operator=Operator.EXISTS, threshold=None).threshold is None


def test_range_requires_threshold_max():
    with pytest.raises(ValidationError):
        _criterion(operator=Operator.RANGE, threshold="1")


def test_range_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        _criterion(operator=Operator.RANGE, threshold="5", threshold_max="1")


def test_range_accepts_equal_bounds():
    c = _criterion(operator=Operator.RANGE, threshold="5", threshold_max="5")
    assert c.threshold_max == Decimal("5")


def test_threshold_max_forbidden_outside_range():
    with pytest.raises(ValidationError):
        _criterion(threshold_max="30")


@pytest.mark.parametrize("points", [-101, 101])
def test_points_outside_bounds_rejected(points):
    with pytest.raises(ValidationError):
        _criterion(points=points)


def test_negative_points_allowed():
    assert _criterion(points=-100).points == -100


def test_float_threshold_rejected():
    with pytest.raises(ValidationError):
        _criterion(threshold=20.5)


def test_criterion_is_frozen():
    c = _criterion()
    with pytest.raises(ValidationError):
        c.points = 1  # type: ignore[misc]


def test_renewed_changes_only_id():
    c = _criterion()
    renewed = c.renewed()
    assert renewed.criterion_id != c.criterion_id
    assert renewed.model_dump(exclude={"criterion_id"}) == c.model_dump(exclude={"criterion_id"})


# --- CriteriaVersion ---

def test_create_starts_at_version_one():
    v = CriteriaVersion.create(uuid4(), "Set", "US", [_criterion()])
    assert v.version == 1
    assert v.is_active is True


def test_create_issues_fresh_criterion_ids():
    c = _criterion()
    v = CriteriaVersion.create(uuid4(), "Set", "US", [c])
    assert v.criteria[0].criterion_id != c.criterion_id


def test_next_version_increments_and_keeps_original():
    v = _version()
    successor = v.next_version()
    assert successor.version == 2
    assert successor.version_id != v.version_id
    assert v.version == 1
    assert len(successor.criteria) == len(v.criteria)


def test_next_version_replaces_criteria():
    v = _version()
    successor = v.next_version([_criterion(name="Only")])
    assert [c.name for c in successor.criteria] == ["Only"]


def test_copy_as_uses_copy_suffix():
    copy = _version(name="Growth").copy_as()
    assert copy.name == "Growth (Copy)"
    assert copy.version == 1


def test_copy_as_accepts_new_market():
    assert _version().copy_as(target_market="US").target_market == "US"


def test_deactivated_clears_flag_only():
    v = _version()
    off = v.deactivated()
    assert off.is_active is False
    assert off.version_id == v.version_id


def test_max_score_sums_positive_points():
    v = _version(criteria=[_criterion(points=10), _criterion(name="Bad", points=-5), _criterion(name="Ok", points=3)])
    assert v.max_score == 13
