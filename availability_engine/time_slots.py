"""Fixed vocabulary of hourly time slots and their time-of-day groupings."""

from typing import Literal, Optional

MORNING_SLOTS: tuple[str, ...] = ("06:00", "07:00", "08:00", "09:00", "10:00", "11:00")
AFTERNOON_SLOTS: tuple[str, ...] = ("12:00", "13:00", "14:00", "15:00", "16:00", "17:00")
EVENING_SLOTS: tuple[str, ...] = ("18:00", "19:00", "20:00", "21:00")

ALL_SLOTS: tuple[str, ...] = MORNING_SLOTS + AFTERNOON_SLOTS + EVENING_SLOTS

# AM covers the morning; PM covers afternoon and evening together
AM_SLOTS: tuple[str, ...] = MORNING_SLOTS
PM_SLOTS: tuple[str, ...] = AFTERNOON_SLOTS + EVENING_SLOTS

TimePeriod = Literal["morning", "afternoon", "evening", "any"]

TIME_PERIODS: dict[str, tuple[str, ...]] = {
    "morning": MORNING_SLOTS,
    "afternoon": AFTERNOON_SLOTS,
    "evening": EVENING_SLOTS,
    "any": ALL_SLOTS,
}

TIME_PERIOD_LABELS: dict[str, str] = {
    "morning": "Morning (6am - 12pm)",
    "afternoon": "Afternoon (12pm - 6pm)",
    "evening": "Evening (6pm - 10pm)",
    "any": "Any Time",
}

_SLOT_INDEX = {slot: i for i, slot in enumerate(ALL_SLOTS)}


def is_time_slot(value: object) -> bool:
    """True if value is one of the 16 canonical slot labels."""
    return isinstance(value, str) and value in _SLOT_INDEX


def slot_index(slot: str) -> int:
    """Position of slot in ALL_SLOTS. Raises KeyError for unknown labels."""
    return _SLOT_INDEX[slot]


def slots_for_period(period: Optional[str]) -> tuple[str, ...]:
    """Resolve a time preference (None means any) to its ordered slot set."""
    return TIME_PERIODS[period or "any"]


def period_for_slot(slot: str) -> str:
    """Time-of-day group a slot belongs to."""
    if slot in MORNING_SLOTS:
        return "morning"
    if slot in AFTERNOON_SLOTS:
        return "afternoon"
    if slot in EVENING_SLOTS:
        return "evening"
    return "any"


def next_slot(slot: str) -> Optional[str]:
    idx = _SLOT_INDEX.get(slot)
    if idx is None or idx == len(ALL_SLOTS) - 1:
        return None
    return ALL_SLOTS[idx + 1]


def previous_slot(slot: str) -> Optional[str]:
    idx = _SLOT_INDEX.get(slot)
    if idx is None or idx == 0:
        return None
    return ALL_SLOTS[idx - 1]


def slot_end(slot: str) -> str:
    """End time (HH:MM) of a one-hour slot; 21:00 ends at 22:00."""
    hour = int(slot.split(":")[0])
    return f"{hour + 1:02d}:00"


def format_time_slot(slot: str) -> str:
    """
    Format a slot label for display.
    '09:00' -> '9:00 AM', '14:00' -> '2:00 PM', '22:00' -> '10:00 PM'.
    """
    hour = int(slot.split(":")[0])
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display_hour}:00 {suffix}"
