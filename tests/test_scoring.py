"""Unit tests for contiguity scoring."""

from datetime import date

from availability_engine.schema import DayAvailability, TimeSlotRef
from availability_engine.scoring import (
    contiguity_score,
    contiguous_hours,
    describe,
    open_hours_after,
    open_hours_before,
    rank_candidates,
)
from availability_engine.time_slots import ALL_SLOTS, period_for_slot


def _ref(day: date, slot: str) -> TimeSlotRef:
    return TimeSlotRef(date=day, slot=slot, period=period_for_slot(slot))


def test_counts_stop_at_blocked_slot():
    day = DayAvailability.from_blocked(["08:00", "12:00"])
    assert open_hours_before(day, "10:00") == 1
    assert open_hours_after(day, "10:00") == 1
    assert contiguous_hours(day, "10:00") == 3


def test_counts_stop_at_day_boundaries():
    day = DayAvailability.from_blocked(())
    assert open_hours_before(day, "06:00") == 0
    assert open_hours_after(day, "21:00") == 0
    assert contiguous_hours(day, "06:00") == 16


def test_score_formula():
    day = DayAvailability.from_blocked(["12:00"])
    # 06:00-11:00 open: 5 before + 0 after + 1
    assert contiguity_score(day, "11:00") == 0.6


def test_isolated_slot_scores_one_tenth():
    day = DayAvailability.from_blocked([s for s in ALL_SLOTS if s != "15:00"])
    assert contiguity_score(day, "15:00") == 0.1


def test_score_capped_at_one():
    day = DayAvailability.from_blocked(())
    assert contiguity_score(day, "13:00") == 1.0


def test_describe_names_window():
    day = DayAvailability.from_blocked(["09:00", "13:00"])
    assert describe(day, "11:00") == "3 contiguous hours available (10:00 AM - 1:00 PM)"
    lone = DayAvailability.from_blocked([s for s in ALL_SLOTS if s != "21:00"])
    assert describe(lone, "21:00") == "1 contiguous hour available (9:00 PM - 10:00 PM)"


def test_rank_sorts_descending_and_truncates():
    d = date(2026, 3, 10)
    day = DayAvailability.from_blocked(["09:00", "10:00", "11:00", "12:00"])
    candidates = [(_ref(d, s), day) for s in ("06:00", "07:00", "08:00", "13:00", "14:00")]
    ranked = rank_candidates(candidates, count=3)
    assert len(ranked) == 3
    scores = [s.score for s in ranked]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= s <= 1.0 for s in scores)
    assert ranked[0].slot == "13:00"


def test_rank_ties_keep_date_slot_order():
    """Equal scores stay in ascending (date, slot) order."""
    open_day = DayAvailability.from_blocked(())
    candidates = [
        (_ref(date(2026, 3, 1), "06:00"), open_day),
        (_ref(date(2026, 3, 1), "07:00"), open_day),
        (_ref(date(2026, 3, 2), "06:00"), open_day),
    ]
    ranked = rank_candidates(candidates, count=10)
    assert [(s.date, s.slot) for s in ranked] == [
        (date(2026, 3, 1), "06:00"),
        (date(2026, 3, 1), "07:00"),
        (date(2026, 3, 2), "06:00"),
    ]
