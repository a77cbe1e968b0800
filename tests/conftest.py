"""Pytest configuration and fixtures."""

import pytest

from availability_engine.schema import AvailabilityStore, DayAvailability
from availability_engine.time_slots import ALL_SLOTS, MORNING_SLOTS


@pytest.fixture
def empty_store() -> AvailabilityStore:
    """Store with nothing blocked."""
    return AvailabilityStore()


@pytest.fixture
def january_store() -> AvailabilityStore:
    """2026-01-05 fully blocked, every other date open."""
    return AvailabilityStore(
        entries={
            "2026-01-05": DayAvailability.from_blocked(
                ALL_SLOTS, full_day_block=True, event_name="Conference"
            ),
        }
    )


@pytest.fixture
def mixed_store() -> AvailabilityStore:
    """Canonical and legacy entries side by side, as loaded from older data."""
    return AvailabilityStore.model_validate(
        {
            "version": 2,
            "entries": {
                # Whole day blocked, bare boolean
                "2026-02-01": True,
                # Morning blocked, AM/PM pair
                "2026-02-02": {"AM": True, "PM": False, "eventName": "Standup"},
                # Afternoon + evening blocked, first-generation record
                "2026-02-03": {"date": "2026-02-03", "status": "pm"},
                # Single hour blocked, canonical
                "2026-02-04": {"slots": {"09:00": True}, "eventName": "Quick Call"},
                # Explicitly open, legacy boolean
                "2026-02-05": False,
            },
        }
    )


@pytest.fixture
def scoring_store() -> AvailabilityStore:
    """
    2026-03-10: 06:00-11:00 open, everything from 12:00 blocked.
    2026-03-11: only 15:00 open.
    """
    morning_open = [slot for slot in ALL_SLOTS if slot not in MORNING_SLOTS]
    isolated = [slot for slot in ALL_SLOTS if slot != "15:00"]
    return AvailabilityStore(
        entries={
            "2026-03-10": DayAvailability.from_blocked(morning_open),
            "2026-03-11": DayAvailability.from_blocked(isolated),
        }
    )
