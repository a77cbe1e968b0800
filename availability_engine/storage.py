"""Persistence collaborators: load and save availability store snapshots."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from availability_engine.schema import AvailabilityStore, OwnerProfile

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"


class StorageError(Exception):
    """Stored or imported data could not be read."""


class AvailabilityRepository(Protocol):
    """Load/save contract the query layer relies on."""

    def load(self) -> AvailabilityStore: ...

    def save(self, store: AvailabilityStore) -> None: ...


def dump_store(store: AvailabilityStore) -> dict[str, Any]:
    """JSON-ready form of a store. Legacy and unrecognized entries keep their stored shape."""
    return store.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_store(data: Any) -> AvailabilityStore:
    """Build a store from decoded JSON; None means nothing stored yet."""
    if data is None:
        return AvailabilityStore()
    try:
        return AvailabilityStore.model_validate(data)
    except ValidationError as e:
        raise StorageError(f"Invalid availability data: {e}") from e


class InMemoryRepository:
    """Keeps the serialized document in memory. Every load returns a fresh snapshot."""

    def __init__(self, data: Optional[dict[str, Any]] = None) -> None:
        self._data = data

    def load(self) -> AvailabilityStore:
        return parse_store(self._data)

    def save(self, store: AvailabilityStore) -> None:
        self._data = dump_store(store)

    def clear(self) -> None:
        self._data = None


class JsonFileRepository:
    """Stores the availability document (store plus owner profile) as one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Any:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.exception("Availability file %s is not valid JSON", self.path)
            raise StorageError(f"Could not parse {self.path}: {e}") from e

    def load(self) -> AvailabilityStore:
        store = parse_store(self._read())
        logger.info("Loaded %d availability entries from %s", len(store.entries), self.path)
        return store

    def save(self, store: AvailabilityStore) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(dump_store(store), indent=2), encoding="utf-8")
        tmp.replace(self.path)
        logger.info("Saved %d availability entries to %s", len(store.entries), self.path)

    def load_profile(self) -> Optional[OwnerProfile]:
        return self.load().owner_profile

    def save_profile(self, profile: OwnerProfile) -> None:
        store = self.load()
        self.save(store.model_copy(update={"owner_profile": profile}))

    def export_data(self) -> str:
        """Backup document with the store, the owner profile and an export timestamp."""
        store = self.load()
        document = {
            "version": EXPORT_FORMAT_VERSION,
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "availability": dump_store(store),
            "profile": (
                store.owner_profile.model_dump(mode="json", by_alias=True)
                if store.owner_profile
                else None
            ),
        }
        return json.dumps(document, indent=2)

    def import_data(self, json_data: str) -> None:
        """Replace stored data with an export_data document. Raises StorageError if invalid."""
        try:
            document = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise StorageError(f"Import failed: {e}") from e
        if not isinstance(document, dict) or "availability" not in document:
            raise StorageError("Import failed: missing availability section")

        store = parse_store(document["availability"])
        if document.get("profile"):
            try:
                profile = OwnerProfile.model_validate(document["profile"])
            except ValidationError as e:
                raise StorageError(f"Import failed: invalid profile: {e}") from e
            store = store.model_copy(update={"owner_profile": profile})
        self.save(store)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
