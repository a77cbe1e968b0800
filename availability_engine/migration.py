"""
Migration between stored availability shapes.

Legacy entries (bare booleans, AM/PM pairs, first-generation status records)
are upgraded to the canonical 16-slot DayAvailability on read. Canonical
entries pass through untouched, so normalize is idempotent.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from availability_engine.errors import MigrationError
from availability_engine.schema import (
    CURRENT_STORE_VERSION,
    AvailabilityStore,
    DayAvailability,
    LegacyFullDay,
    LegacyHalfDay,
    LegacyStatusRecord,
    MigrationStats,
    UnrecognizedEntry,
    tag_entry,
)
from availability_engine.time_slots import ALL_SLOTS, AM_SLOTS, PM_SLOTS

logger = logging.getLogger(__name__)

_STATUS_SLOTS = {
    "full": ALL_SLOTS,
    "am": AM_SLOTS,
    "pm": PM_SLOTS,
}


def normalize(entry: Any, date: Optional[str] = None) -> DayAvailability:
    """
    Upgrade one stored entry to the canonical shape.

    Accepts tagged entry models or raw stored values. A canonical entry is
    returned as-is. Raises MigrationError for anything unrecognized; `date` is
    only used to make that error message point at the offending key.
    """
    entry = tag_entry(entry)

    if isinstance(entry, DayAvailability):
        return entry

    if isinstance(entry, LegacyFullDay):
        return DayAvailability.from_blocked(
            ALL_SLOTS if entry.blocked else (), full_day_block=entry.blocked
        )

    if isinstance(entry, LegacyHalfDay):
        blocked = (AM_SLOTS if entry.am else ()) + (PM_SLOTS if entry.pm else ())
        return DayAvailability.from_blocked(
            blocked,
            full_day_block=entry.am and entry.pm,
            event_name=entry.event_name,
        )

    if isinstance(entry, LegacyStatusRecord):
        return DayAvailability.from_blocked(
            _STATUS_SLOTS[entry.status],
            full_day_block=entry.status == "full",
            event_name=entry.event_name,
        )

    if isinstance(entry, UnrecognizedEntry):
        logger.error("Refusing to migrate unrecognized entry for %s: %r", date, entry.value)
        raise MigrationError(entry.value, date=date, reason=entry.reason)

    raise MigrationError(entry, date=date)


def derive_legacy_view(entry: DayAvailability) -> LegacyHalfDay:
    """
    AM/PM view of a canonical entry for consumers of the old shape.

    AM is true if any morning hour is blocked; PM if any afternoon or evening
    hour is. One blocked hour is indistinguishable from a whole blocked half.
    """
    return LegacyHalfDay(
        am=any(entry.slots[slot] for slot in AM_SLOTS),
        pm=any(entry.slots[slot] for slot in PM_SLOTS),
        event_name=entry.event_name,
    )


def migrate_store(store: AvailabilityStore) -> AvailabilityStore:
    """Return a new current-version store with every entry in canonical shape."""
    migrated = {}
    upgraded = 0
    for date, entry in store.entries.items():
        canonical = normalize(entry, date=date)
        if canonical is not entry:
            upgraded += 1
        migrated[date] = canonical

    if upgraded:
        logger.info("Migrated %d legacy entries to version %d", upgraded, CURRENT_STORE_VERSION)

    return store.model_copy(
        update={
            "version": CURRENT_STORE_VERSION,
            "entries": migrated,
            "last_modified": datetime.now(timezone.utc).isoformat(),
        }
    )


def convert_to_legacy(store: AvailabilityStore) -> list[LegacyStatusRecord]:
    """
    First-generation status records for export or backup.
    Dates with nothing blocked are skipped.
    """
    records = []
    for date in sorted(store.entries):
        canonical = normalize(store.entries[date], date=date)
        view = derive_legacy_view(canonical)
        if canonical.full_day_block or (view.am and view.pm):
            status = "full"
        elif view.am:
            status = "am"
        elif view.pm:
            status = "pm"
        else:
            continue
        records.append(
            LegacyStatusRecord(date=date, status=status, event_name=canonical.event_name)
        )
    return records


def migration_stats(store: AvailabilityStore) -> MigrationStats:
    """Count full-day blocks, partial blocks and blocked slots across a store."""
    stats = MigrationStats(version=store.version, total_dates=len(store.entries))
    for date, entry in store.entries.items():
        canonical = normalize(entry, date=date)
        blocked = len(canonical.blocked_slots())
        stats.total_blocked_slots += blocked
        if canonical.full_day_block or blocked == len(ALL_SLOTS):
            stats.full_day_blocks += 1
        elif blocked:
            stats.partial_blocks += 1
    return stats


def validate_migration(original: AvailabilityStore, migrated: AvailabilityStore) -> list[str]:
    """Compare a store with its migrated copy. Returns a list of problems, empty if none."""
    errors = []
    if len(original.entries) != len(migrated.entries):
        errors.append(
            f"Date count mismatch: {len(original.entries)} original, "
            f"{len(migrated.entries)} migrated"
        )
    for date, entry in original.entries.items():
        target = migrated.entries.get(date)
        if target is None:
            errors.append(f"Missing date in migration: {date}")
            continue
        before = getattr(entry, "event_name", None)
        after = getattr(target, "event_name", None)
        if before != after:
            errors.append(f'Event name mismatch for {date}: "{before}" -> "{after}"')
    return errors


def compact_store(store: AvailabilityStore) -> AvailabilityStore:
    """
    Drop entries whose canonical form has nothing blocked.
    An absent date and an all-open entry answer every query identically.
    """
    kept = {}
    for date, entry in store.entries.items():
        canonical = normalize(entry, date=date)
        if canonical.is_fully_available() and canonical.event_name is None:
            continue
        kept[date] = entry
    return store.model_copy(update={"entries": kept})
