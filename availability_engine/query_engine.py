"""Deterministic query engine over an availability store snapshot."""

import logging
from datetime import date, timedelta
from typing import Any, Iterator, Optional, Union

from availability_engine.migration import normalize
from availability_engine.schema import (
    AvailabilityQuery,
    AvailabilityStore,
    DayAvailability,
    QueryResult,
    TimeSlotRef,
)
from availability_engine.scoring import open_hours_after, rank_candidates
from availability_engine.time_slots import (
    ALL_SLOTS,
    TIME_PERIOD_LABELS,
    period_for_slot,
    slots_for_period,
)
from availability_engine.validator import validate

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_COUNT = 5

# Consecutive open hours a slot must start for the requested duration
DURATION_HOURS = {
    "1hour": 1,
    "half-day": 6,
    "full-day": len(ALL_SLOTS),
}

_OPEN_DAY = DayAvailability.from_blocked(())


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Each date from start to end inclusive, built fresh from an integer offset."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def _day_for(store: AvailabilityStore, day: date) -> DayAvailability:
    """Canonical entry for day; an absent date is fully open."""
    entry = store.entry_for(day)
    if entry is None:
        return _OPEN_DAY
    return normalize(entry, date=day.isoformat())


def _slot_candidates(
    query: AvailabilityQuery,
    store: AvailabilityStore,
) -> list[tuple[TimeSlotRef, DayAvailability]]:
    """Open (date, slot) pairs in ascending order, filtered by time preference and duration."""
    slots = slots_for_period(query.time_preference)
    required = DURATION_HOURS[query.slot_duration or "1hour"]
    candidates = []
    for day in iter_dates(query.date_range.start, query.date_range.end):
        availability = _day_for(store, day)
        for slot in slots:
            if availability.is_blocked(slot):
                continue
            if required > 1 and open_hours_after(availability, slot) + 1 < required:
                continue
            ref = TimeSlotRef(date=day, slot=slot, period=period_for_slot(slot))
            candidates.append((ref, availability))
    return candidates


def _other_periods(preference: Optional[str]) -> list[str]:
    return [p for p in ("morning", "afternoon", "evening") if p != preference]


def _day_suggestions() -> list[str]:
    return [
        "No fully open days in this range - try searching for specific time slots instead",
        "Try expanding your date range to find fully open days",
    ]


def _slot_suggestions(query: AvailabilityQuery) -> list[str]:
    preference = query.time_preference or "any"
    suggestions = []
    if preference != "any":
        for period in _other_periods(preference):
            suggestions.append(
                f"Try {TIME_PERIOD_LABELS[period].lower()} instead of {preference}"
            )
    else:
        suggestions.append(
            "Try expanding your date range - no availability found in the current period"
        )
    if query.slot_duration in ("half-day", "full-day"):
        suggestions.append("Try 1-hour slots instead - longer blocks may not be available")
    return suggestions


def find_days(query: AvailabilityQuery, store: AvailabilityStore) -> QueryResult:
    """Dates in range with every slot unblocked."""
    days = [
        day
        for day in iter_dates(query.date_range.start, query.date_range.end)
        if _day_for(store, day).is_fully_available()
    ]
    if query.count is not None:
        days = days[: query.count]
    return QueryResult(
        intent="find_days",
        items=days,
        query=query,
        suggestions=None if days else _day_suggestions(),
    )


def find_slots(query: AvailabilityQuery, store: AvailabilityStore) -> QueryResult:
    """Open slots in range within the requested time-of-day group, capped at count."""
    refs = [ref for ref, _ in _slot_candidates(query, store)]
    if query.count is not None:
        refs = refs[: query.count]
    return QueryResult(
        intent="find_slots",
        items=refs,
        query=query,
        suggestions=None if refs else _slot_suggestions(query),
    )


def suggest_times(query: AvailabilityQuery, store: AvailabilityStore) -> QueryResult:
    """Open slots ranked by contiguity score, best first, ties in (date, slot) order."""
    count = query.count if query.count is not None else DEFAULT_SUGGESTION_COUNT
    ranked = rank_candidates(_slot_candidates(query, store), count)
    return QueryResult(
        intent="suggest_times",
        items=ranked,
        query=query,
        suggestions=None if ranked else _slot_suggestions(query),
    )


_HANDLERS = {
    "find_days": find_days,
    "find_slots": find_slots,
    "suggest_times": suggest_times,
}


def execute(
    query: Union[AvailabilityQuery, dict[str, Any]],
    store: AvailabilityStore,
) -> QueryResult:
    """
    Validate a query, then run it against a store snapshot.

    Raises ValidationError before touching the store, and MigrationError if
    any date in range holds an unrecognized entry. No partial results.
    """
    query = validate(query)
    if isinstance(store, dict):
        store = AvailabilityStore.model_validate(store)

    result = _HANDLERS[query.intent](query, store)
    logger.debug(
        "%s %s..%s returned %d items",
        query.intent,
        query.date_range.start,
        query.date_range.end,
        len(result.items),
    )
    return result
