"""Contiguity scoring for meeting-time suggestions."""

from availability_engine.schema import DayAvailability, MeetingSuggestion, TimeSlotRef
from availability_engine.time_slots import (
    ALL_SLOTS,
    format_time_slot,
    next_slot,
    previous_slot,
    slot_end,
    slot_index,
)

# Contiguous hours at which a slot reaches the maximum score
FULL_SCORE_HOURS = 10


def open_hours_before(day: DayAvailability, slot: str) -> int:
    """Consecutive unblocked hours immediately before slot, stopping at 06:00 or a block."""
    count = 0
    neighbour = previous_slot(slot)
    while neighbour is not None and not day.slots[neighbour]:
        count += 1
        neighbour = previous_slot(neighbour)
    return count


def open_hours_after(day: DayAvailability, slot: str) -> int:
    """Consecutive unblocked hours immediately after slot, stopping at 21:00 or a block."""
    count = 0
    neighbour = next_slot(slot)
    while neighbour is not None and not day.slots[neighbour]:
        count += 1
        neighbour = next_slot(neighbour)
    return count



def contiguous_hours(day: DayAvailability, slot: str) -> int:
    """Length of the open run containing slot (the slot itself included)."""
    return open_hours_before(day, slot) + open_hours_after(day, slot) + 1


def contiguity_score(day: DayAvailability, slot: str) -> float:
    """Score in [0, 1]: contiguous open hours around slot, divided by 10 and capped."""
    return min(contiguous_hours(day, slot) / FULL_SCORE_HOURS, 1.0)


def describe(day: DayAvailability, slot: str) -> str:
    """Human-readable reason naming the contiguous window a slot sits in."""
    hours = contiguous_hours(day, slot)
    first = ALL_SLOTS[slot_index(slot) - open_hours_before(day, slot)]
    last = ALL_SLOTS[slot_index(slot) + open_hours_after(day, slot)]
    plural = "s" if hours != 1 else ""
    return (
        f"{hours} contiguous hour{plural} available "
        f"({format_time_slot(first)} - {format_time_slot(slot_end(last))})"
    )


def rank_candidates(
    candidates: list[tuple[TimeSlotRef, DayAvailability]],
    count: int,
) -> list[MeetingSuggestion]:
    """
    Score candidates and return the best `count`, highest score first.

    Candidates must arrive in ascending (date, slot) order; the sort is stable,
    so equal scores keep that order.
    """
    suggestions = [
        MeetingSuggestion(
            date=ref.date,
            slot=ref.slot,
            period=ref.period,
            score=contiguity_score(day, ref.slot),
            reason=describe(day, ref.slot),
        )
        for ref, day in candidates
    ]
    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[:count]
