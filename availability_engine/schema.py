"""Pydantic models for the availability store, queries, results and API payloads."""

import datetime as dt
import re
from typing import Any, Iterable, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

from availability_engine.time_slots import ALL_SLOTS, TimePeriod, is_time_slot

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
CURRENT_STORE_VERSION = 2
KNOWN_STORE_VERSIONS = (1, 2)

QueryIntent = Literal["find_days", "find_slots", "suggest_times"]
SlotDuration = Literal["1hour", "half-day", "full-day"]


class WireModel(BaseModel):
    """Snake-case attributes, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Per-date entries ---


class DayAvailability(WireModel):
    """Canonical per-date record: every one of the 16 slots maps to a blocked flag."""

    model_config = ConfigDict(extra="forbid")

    slots: dict[str, StrictBool] = Field(..., description="Time slot -> blocked")
    full_day_block: bool = False
    event_name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("slots", mode="before")
    @classmethod
    def complete_slot_map(cls, value: Any) -> dict[str, Any]:
        # Older builds serialized the map as [[slot, blocked], ...] and only
        # stored the slots that had been touched.
        if isinstance(value, (list, tuple)):
            try:
                value = dict(value)
            except (TypeError, ValueError):
                raise ValueError("slots list must contain [slot, blocked] pairs")
        if not isinstance(value, dict):
            raise ValueError("slots must map time slots to blocked flags")
        unknown = [str(k) for k in value if not is_time_slot(k)]
        if unknown:
            raise ValueError(f"unknown time slots: {', '.join(unknown)}")
        return {slot: value.get(slot, False) for slot in ALL_SLOTS}

    @field_validator("full_day_block", mode="before")
    @classmethod
    def unset_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def from_blocked(cls, blocked: Iterable[str] = (), **metadata: Any) -> "DayAvailability":
        """Build a record with exactly the given slots blocked."""
        blocked = set(blocked)
        return cls(slots={slot: slot in blocked for slot in ALL_SLOTS}, **metadata)

    def is_blocked(self, slot: str) -> bool:
        return self.slots[slot]

    def blocked_slots(self) -> list[str]:
        return [slot for slot in ALL_SLOTS if self.slots[slot]]

    def is_fully_available(self) -> bool:
        return not any(self.slots.values())

    def is_fully_blocked(self) -> bool:
        return all(self.slots.values())


class LegacyFullDay(BaseModel):
    """Oldest shape: a bare boolean for the whole day."""

    blocked: bool

    @model_serializer
    def serialize_stored(self) -> bool:
        return self.blocked


class LegacyHalfDay(BaseModel):
    """AM/PM pair. PM covers both afternoon and evening."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    am: StrictBool = Field(
        validation_alias=AliasChoices("AM", "morningBlocked"), serialization_alias="AM"
    )
    pm: StrictBool = Field(
        validation_alias=AliasChoices("PM", "eveningBlocked"), serialization_alias="PM"
    )
    event_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("eventName", "event_name"),
        serialization_alias="eventName",
    )


class LegacyStatusRecord(BaseModel):
    """First-generation record: {date, status: full|am|pm, eventName?}."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    date: str = Field(..., pattern=ISO_DATE_PATTERN)
    status: Literal["full", "am", "pm"]
    event_name: Optional[str] = Field(default=None, alias="eventName")


class UnrecognizedEntry(BaseModel):
    """Stored value matching no known shape. Kept verbatim so saving never loses it."""

    value: Any = None
    reason: str = ""

    @model_serializer
    def serialize_stored(self) -> Any:
        return self.value


TAGGED_ENTRY_TYPES = (
    DayAvailability,
    UnrecognizedEntry,
    LegacyFullDay,
    LegacyHalfDay,
    LegacyStatusRecord,
)

_HALF_DAY_KEYS = {"AM", "PM", "morningBlocked", "eveningBlocked"}


def _summarize(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'value'}: {e['msg']}" for e in error.errors()
    )


def tag_entry(raw: Any) -> Any:
    """
    Classify a stored value once, at load time, into one of the entry models.
    Values that fit no shape become UnrecognizedEntry rather than being dropped.
    """
    if isinstance(raw, TAGGED_ENTRY_TYPES):
        return raw
    try:
        if isinstance(raw, bool):
            return LegacyFullDay(blocked=raw)
        if isinstance(raw, dict):
            if "slots" in raw:
                return DayAvailability.model_validate(raw)
            if "status" in raw and "date" in raw:
                return LegacyStatusRecord.model_validate(raw)
            if _HALF_DAY_KEYS & raw.keys():
                return LegacyHalfDay.model_validate(raw)
    except ValidationError as e:
        return UnrecognizedEntry(value=raw, reason=_summarize(e))
    return UnrecognizedEntry(value=raw, reason=f"unsupported {type(raw).__name__} value")


# --- Store ---


class OwnerProfile(WireModel):
    """Instructor who owns the calendar."""

    id: str = Field(..., min_length=1)
    slug: str = ""
    display_name: str = Field(default="", max_length=100)
    email: Optional[str] = None
    timezone: Optional[str] = None
    is_public: bool = False


class AvailabilityStore(WireModel):
    """
    Versioned container of per-date entries keyed by ISO date.
    Entries hold tagged models (canonical, legacy or unrecognized).
    """

    version: int = CURRENT_STORE_VERSION
    entries: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("entries", "blockedDates"),
    )
    owner_profile: Optional[OwnerProfile] = None
    instructor_id: Optional[str] = None
    last_modified: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def default_legacy_version(cls, data: Any) -> Any:
        # Very old payloads were written without a version number
        if isinstance(data, dict) and "blockedDates" in data and "version" not in data:
            return {**data, "version": 1}
        return data

    @field_validator("version")
    @classmethod
    def known_version(cls, value: int) -> int:
        if value not in KNOWN_STORE_VERSIONS:
            raise ValueError(f"unknown store version {value}")
        return value

    @field_validator("entries", mode="before")
    @classmethod
    def tag_entries(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if isinstance(value, list):
            # Version 1 kept a list of status records
            keyed = {}
            for record in value:
                if not isinstance(record, dict) or "date" not in record:
                    raise ValueError(f"list entry without a date: {record!r}")
                keyed[record["date"]] = record
            value = keyed
        if not isinstance(value, dict):
            raise ValueError("entries must be a mapping of ISO date to availability")
        tagged = {}
        for key, raw in value.items():
            _check_iso_date(key)
            tagged[key] = tag_entry(raw)
        return tagged

    def entry_for(self, day: dt.date) -> Any:
        """Tagged entry stored for day, or None when the date is absent."""
        return self.entries.get(day.isoformat())

    def has_legacy_entries(self) -> bool:
        return any(not isinstance(e, DayAvailability) for e in self.entries.values())


def _check_iso_date(key: Any) -> None:
    # fromisoformat alone also takes week dates such as 2026-W01-1
    if not isinstance(key, str) or not re.fullmatch(ISO_DATE_PATTERN, key):
        raise ValueError(f"invalid date key {key!r}, expected YYYY-MM-DD")
    try:
        dt.date.fromisoformat(key)
    except ValueError:
        raise ValueError(f"invalid date key {key!r}, expected YYYY-MM-DD")


class MigrationStats(WireModel):
    """Counts describing a store's blocked dates."""

    version: int
    total_dates: int = 0
    full_day_blocks: int = 0
    partial_blocks: int = 0
    total_blocked_slots: int = 0


# --- Queries and results ---


class DateRange(WireModel):
    """Inclusive date range."""

    start: dt.date
    end: dt.date

    @field_validator("start", "end", mode="before")
    @classmethod
    def date_part(cls, value: Any) -> Any:
        # Producers sometimes send full ISO datetimes
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class AvailabilityQuery(WireModel):
    """Structured availability question. Bounds are enforced by validator.validate."""

    intent: QueryIntent
    date_range: DateRange
    time_preference: Optional[TimePeriod] = None
    slot_duration: Optional[SlotDuration] = None
    count: Optional[StrictInt] = None


class TimeSlotRef(WireModel):
    """One open hour on one date."""

    date: dt.date
    slot: str
    period: str


class MeetingSuggestion(TimeSlotRef):
    """Ranked candidate meeting time."""

    score: float = Field(..., ge=0.0, le=1.0)
    reason: str


class QueryResult(WireModel):
    """
    Result of executing a query. Items are homogeneous per intent:
    dates for find_days, TimeSlotRef for find_slots, MeetingSuggestion for suggest_times.
    """

    intent: QueryIntent
    items: list[Any] = Field(default_factory=list)
    query: AvailabilityQuery
    suggestions: Optional[list[str]] = None


# --- Request / Response ---


class ParseQueryRequest(WireModel):
    """Request body for POST /parse-query."""

    user_query: str = Field(..., min_length=1, max_length=500)

    @field_validator("user_query", mode="before")
    @classmethod
    def strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class ParseQueryResponse(WireModel):
    """Response from POST /parse-query."""

    success: bool = True
    query: AvailabilityQuery
    warning: Optional[str] = Field(
        default=None, description="Set when the pattern fallback produced the query"
    )


class ExecuteQueryResponse(WireModel):
    """Response from POST /execute-query."""

    success: bool = True
    results: QueryResult
    query: AvailabilityQuery


class AvailabilitySummary(WireModel):
    """Response from GET /availability."""

    stats: MigrationStats
    legacy_view: list[LegacyStatusRecord] = Field(default_factory=list)
