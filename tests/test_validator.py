"""Tests for query validation."""

from datetime import date

import pytest

from availability_engine.errors import ValidationError
from availability_engine.schema import AvailabilityQuery, DateRange
from availability_engine.validator import validate


def _query(**overrides):
    body = {
        "intent": "find_slots",
        "dateRange": {"start": "2026-01-01", "end": "2026-01-31"},
    }
    body.update(overrides)
    return body


def test_valid_wire_query():
    query = validate(_query(timePreference="morning", slotDuration="1hour", count=10))
    assert isinstance(query, AvailabilityQuery)
    assert query.date_range.start == date(2026, 1, 1)
    assert query.time_preference == "morning"
    assert query.count == 10


def test_snake_case_keys_accepted():
    query = validate(
        {"intent": "find_days", "date_range": {"start": "2026-01-01", "end": "2026-01-02"}}
    )
    assert query.intent == "find_days"


def test_iso_datetime_strings_use_date_part():
    query = validate(
        _query(dateRange={"start": "2026-01-06T00:00:00.000Z", "end": "2026-01-12T00:00:00.000Z"})
    )
    assert query.date_range.start == date(2026, 1, 6)
    assert query.date_range.end == date(2026, 1, 12)


def test_rejects_inverted_range():
    with pytest.raises(ValidationError) as exc_info:
        validate(_query(dateRange={"start": "2026-01-31", "end": "2026-01-01"}))
    assert "start date must be before or equal to end date" in str(exc_info.value)


def test_accepts_exactly_ninety_days():
    query = validate(_query(dateRange={"start": "2026-01-01", "end": "2026-04-01"}))
    assert (query.date_range.end - query.date_range.start).days == 90


def test_rejects_more_than_ninety_days():
    with pytest.raises(ValidationError) as exc_info:
        validate(_query(dateRange={"start": "2026-01-01", "end": "2026-04-02"}))
    assert "exceeds maximum of 90 days" in str(exc_info.value)


def test_single_day_range_is_valid():
    query = validate(_query(dateRange={"start": "2026-01-01", "end": "2026-01-01"}))
    assert query.date_range.start == query.date_range.end


@pytest.mark.parametrize(
    "field,value",
    [
        ("intent", "find_weeks"),
        ("timePreference", "night"),
        ("slotDuration", "2hours"),
    ],
)
def test_rejects_unknown_enum_values(field, value):
    with pytest.raises(ValidationError) as exc_info:
        validate(_query(**{field: value}))
    assert field in str(exc_info.value)


@pytest.mark.parametrize("count", [0, -3, 1001, True, "5", 2.0])
def test_rejects_invalid_count(count):
    with pytest.raises(ValidationError) as exc_info:
        validate(_query(count=count))
    assert "count" in str(exc_info.value)


@pytest.mark.parametrize("count", [1, 1000])
def test_accepts_count_bounds(count):
    assert validate(_query(count=count)).count == count


def test_missing_fields_reported():
    with pytest.raises(ValidationError) as exc_info:
        validate({"intent": "find_days"})
    assert any("dateRange" in e for e in exc_info.value.errors)


def test_malformed_date_rejected():
    with pytest.raises(ValidationError):
        validate(_query(dateRange={"start": "next tuesday", "end": "2026-01-31"}))


def test_non_object_rejected():
    with pytest.raises(ValidationError):
        validate(["find_days"])


def test_collects_every_error():
    with pytest.raises(ValidationError) as exc_info:
        validate(_query(dateRange={"start": "2026-03-01", "end": "2026-01-01"}, count=0))
    assert len(exc_info.value.errors) == 2
    assert str(exc_info.value).startswith("Validation failed: ")


def test_instances_are_revalidated():
    """A query object built without validation still has to pass the gate."""
    unchecked = AvailabilityQuery.model_construct(
        intent="find_everything",
        date_range=DateRange(start=date(2026, 1, 1), end=date(2026, 1, 2)),
        time_preference=None,
        slot_duration=None,
        count=None,
    )
    with pytest.raises(ValidationError):
        validate(unchecked)


def test_instance_with_oversized_range_rejected():
    query = AvailabilityQuery(
        intent="find_days",
        date_range=DateRange(start=date(2026, 1, 1), end=date(2026, 12, 31)),
    )
    with pytest.raises(ValidationError):
        validate(query)
