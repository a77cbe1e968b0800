"""Structural validation of availability queries before execution."""

from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from availability_engine.errors import ValidationError
from availability_engine.schema import AvailabilityQuery

MAX_DATE_RANGE_DAYS = 90
MAX_RESULT_COUNT = 1000


def _format_pydantic_errors(error: PydanticValidationError) -> list[str]:
    messages = []
    for e in error.errors():
        path = ".".join(str(p) for p in e["loc"]) or "query"
        messages.append(f"{path}: {e['msg']}")
    return messages


def validate(query: Union[AvailabilityQuery, dict[str, Any]]) -> AvailabilityQuery:
    """
    Re-validate a query in full, whatever produced it.

    Accepts a mapping (wire shape, camelCase or snake_case keys) or an
    AvailabilityQuery instance. Returns a fresh AvailabilityQuery or raises
    ValidationError listing every problem found.
    """
    if isinstance(query, AvailabilityQuery):
        # Instances may have been built with model_construct or mutated
        query = query.model_dump(by_alias=True)
    if not isinstance(query, dict):
        raise ValidationError([f"query: expected an object, got {type(query).__name__}"])

    try:
        parsed = AvailabilityQuery.model_validate(query)
    except PydanticValidationError as e:
        raise ValidationError(_format_pydantic_errors(e)) from e

    errors = []
    start, end = parsed.date_range.start, parsed.date_range.end
    if start > end:
        errors.append("dateRange: start date must be before or equal to end date")
    elif (end - start).days > MAX_DATE_RANGE_DAYS:
        errors.append(
            f"dateRange: {(end - start).days} days exceeds maximum of "
            f"{MAX_DATE_RANGE_DAYS} days"
        )

    if parsed.count is not None:
        if parsed.count <= 0:
            errors.append("count: must be a positive integer")
        elif parsed.count > MAX_RESULT_COUNT:
            errors.append(f"count: cannot exceed {MAX_RESULT_COUNT}")

    if errors:
        raise ValidationError(errors)
    return parsed
