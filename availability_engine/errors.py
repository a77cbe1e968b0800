"""Error types raised by the availability core."""

from typing import Any, Optional


class AvailabilityError(Exception):
    """Base class for errors raised by validation, migration and query execution."""


class ValidationError(AvailabilityError):
    """A query failed structural or range checks. Raised before any store access."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class MigrationError(AvailabilityError):
    """A stored date entry matches none of the known shapes."""

    def __init__(self, value: Any, date: Optional[str] = None, reason: str = "") -> None:
        self.value = value
        self.date = date
        self.reason = reason
        where = f" for {date}" if date else ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unrecognized availability entry{where} ({value!r}){detail}")
