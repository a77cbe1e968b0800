"""FastAPI application exposing availability query parsing and execution."""

import logging
from datetime import date
from typing import Optional

from fastapi import Body, FastAPI, HTTPException

from availability_engine.config import get_settings
from availability_engine.errors import MigrationError, ValidationError
from availability_engine.llm import LLMQueryParser
from availability_engine.migration import convert_to_legacy, migrate_store, migration_stats
from availability_engine.parsing import ParserError, PatternQueryParser
from availability_engine.query_engine import execute
from availability_engine.schema import (
    AvailabilityQuery,
    AvailabilityStore,
    AvailabilitySummary,
    ExecuteQueryResponse,
    ParseQueryRequest,
    ParseQueryResponse,
)
from availability_engine.storage import JsonFileRepository, StorageError
from availability_engine.validator import validate

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FALLBACK_WARNING = "Used fallback parser - results may be less accurate"

app = FastAPI(title="Availability Query Engine", version="0.1.0")


def get_repository() -> JsonFileRepository:
    """Repository holding the instructor's availability document."""
    return JsonFileRepository(get_settings().data_file)


def parse_with_fallback(text: str, today: date) -> tuple[AvailabilityQuery, Optional[str]]:
    """Try the LLM parser first; on any parser failure use the pattern parser."""
    try:
        return LLMQueryParser().parse(text, today), None
    except ParserError as e:
        logger.warning("LLM parsing failed, using fallback parser: %s", e)
        return PatternQueryParser().parse(text, today), FALLBACK_WARNING


def _load_store() -> AvailabilityStore:
    repository = get_repository()
    try:
        store = repository.load()
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if get_settings().persist_migrations and store.has_legacy_entries():
        try:
            migrated = migrate_store(store)
        except MigrationError as e:
            # Queries outside the bad date still work on the unmigrated snapshot
            logger.warning("Stored data not upgraded: %s", e)
            return store
        repository.save(migrated)
        return migrated
    return store


@app.post("/parse-query", response_model=ParseQueryResponse)
def parse_query(request: ParseQueryRequest) -> ParseQueryResponse:
    """
    Convert a natural-language availability question into a structured query.
    Uses the LLM parser when available, the pattern parser otherwise.
    """
    query, warning = parse_with_fallback(request.user_query, date.today())
    return ParseQueryResponse(query=query, warning=warning)


@app.post("/execute-query", response_model=ExecuteQueryResponse)
def execute_query(body: dict = Body(...)) -> ExecuteQueryResponse:
    """
    Execute a structured availability query against the stored calendar.
    Body: AvailabilityQuery wire shape, e.g.
    {"intent": "find_slots", "dateRange": {"start": "2026-01-05", "end": "2026-01-11"}}
    """
    try:
        query = validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        results = execute(query, _load_store())
    except MigrationError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ExecuteQueryResponse(results=results, query=results.query)


@app.get("/availability", response_model=AvailabilitySummary)
def availability_summary() -> AvailabilitySummary:
    """Blocked-date statistics and the AM/PM export view of the stored calendar."""
    store = _load_store()
    try:
        return AvailabilitySummary(
            stats=migration_stats(store),
            legacy_view=convert_to_legacy(store),
        )
    except MigrationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
