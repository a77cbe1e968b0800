"""Query producers: the parser protocol and the deterministic pattern-based parser."""

import calendar
import re
from datetime import date, timedelta
from typing import Optional, Protocol

from availability_engine.schema import AvailabilityQuery, DateRange
from availability_engine.validator import MAX_RESULT_COUNT

DEFAULT_WINDOW_DAYS = 30

_COUNT_RE = re.compile(r"top (\d+)|(\d+) (?:times|suggestions|results|slots|days)")


class ParserError(Exception):
    """A parser could not turn text into a query."""


class QueryParser(Protocol):
    """Turns a natural-language question into a structured query."""

    def parse(self, text: str, today: date) -> AvailabilityQuery: ...


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def resolve_date_range(text: str, today: date) -> DateRange:
    """
    Date range for the relative phrases the pattern parser understands.
    Weeks run Monday to Sunday; anything unrecognized means the next 30 days.
    """
    if "next week" in text:
        start = today + timedelta(days=7 - today.weekday())
        return DateRange(start=start, end=start + timedelta(days=6))
    if "this week" in text:
        start = today - timedelta(days=today.weekday())
        return DateRange(start=start, end=start + timedelta(days=6))
    if "next month" in text:
        year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
        start, end = _month_bounds(year, month)
        return DateRange(start=start, end=end)
    if "this month" in text:
        start, end = _month_bounds(today.year, today.month)
        return DateRange(start=start, end=end)
    if "tomorrow" in text:
        tomorrow = today + timedelta(days=1)
        return DateRange(start=tomorrow, end=tomorrow)
    if "today" in text:
        return DateRange(start=today, end=today)
    return DateRange(start=today, end=today + timedelta(days=DEFAULT_WINDOW_DAYS))


def _extract_count(text: str) -> Optional[int]:
    match = _COUNT_RE.search(text)
    if not match:
        return None
    count = int(match.group(1) or match.group(2))
    if count <= 0:
        return None
    return min(count, MAX_RESULT_COUNT)


class PatternQueryParser:
    """Keyword-based fallback parser. Deterministic and offline."""

    def parse(self, text: str, today: date) -> AvailabilityQuery:
        query = text.lower()

        intent = "find_days"
        if "slot" in query or "time" in query:
            intent = "find_slots"
        if "suggest" in query or "best" in query or "recommend" in query:
            intent = "suggest_times"

        time_preference = "any"
        for period in ("morning", "afternoon", "evening"):
            if period in query:
                time_preference = period

        slot_duration = None
        if "half day" in query or "half-day" in query:
            slot_duration = "half-day"
        if "full day" in query or "full-day" in query:
            slot_duration = "full-day"

        return AvailabilityQuery(
            intent=intent,
            date_range=resolve_date_range(query, today),
            time_preference=time_preference,
            slot_duration=slot_duration,
            count=_extract_count(query),
        )
