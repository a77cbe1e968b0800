"""LLM client that turns free-text availability questions into structured queries."""

import json
import logging
import re
from datetime import date
from typing import Optional

import httpx

from availability_engine.config import get_settings
from availability_engine.errors import ValidationError
from availability_engine.parsing import ParserError
from availability_engine.schema import AvailabilityQuery
from availability_engine.validator import validate

logger = logging.getLogger(__name__)

QUERY_SCHEMA_DESC = """
The JSON must have exactly these fields (intent and dateRange required):
- intent: "find_days" (fully open dates), "find_slots" (specific open hours) or "suggest_times" (ranked meeting times)
- dateRange: {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"} (at most 90 days apart; default today + 30 days)
- timePreference: "morning" (6am-12pm), "afternoon" (12pm-6pm), "evening" (6pm-10pm) or "any"
- slotDuration: "1hour", "half-day" (6 hours) or "full-day" (16 hours)
- count: integer 1-1000, only if the user asks for a number of results
"""

QUERY_EXAMPLES = """
Query: "Avail for next month"
Response: {"intent":"find_days","dateRange":{"start":"2026-01-01","end":"2026-01-31"}}

Query: "Morning slots next week"
Response: {"intent":"find_slots","dateRange":{"start":"2026-01-05","end":"2026-01-11"},"timePreference":"morning"}

Query: "Top 5 afternoon times this week"
Response: {"intent":"suggest_times","dateRange":{"start":"2025-12-29","end":"2026-01-04"},"timePreference":"afternoon","count":5}
"""


class LLMClient:
    """OpenAI-compatible chat completion client."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.llm_timeout_seconds

    def _chat(self, messages: list[dict[str, str]]) -> str:
        """Call chat completion and return content."""
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is required")
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": messages,
                    "temperature": 0.1,
                },
            )
            resp.raise_for_status()
            data = resp.json()
            return data["choices"][0]["message"]["content"]

    @staticmethod
    def _extract_json(text: str) -> str:
        """Extract JSON from model output (handles markdown code blocks)."""
        text = text.strip()
        match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
        if match:
            return match.group(1).strip()
        match = re.search(r"\{[\s\S]*\}", text)
        if match:
            return match.group(0)
        return text

    def parse_query_text(self, text: str, today: date) -> AvailabilityQuery:
        """
        Convert a natural-language question into an AvailabilityQuery.
        The reply is validated in full; one repair round-trip is attempted on failure.
        """
        prompt = f"""You parse natural-language questions about an instructor's calendar availability.
Convert the question into a strict JSON object.
{QUERY_SCHEMA_DESC}
Examples:
{QUERY_EXAMPLES}
Resolve relative dates ("next week", "this month") against today's date: {today.isoformat()}.
Return ONLY valid JSON, no markdown, no explanation.

Question:
{text}
"""

        messages = [{"role": "user", "content": prompt}]
        raw = self._chat(messages)
        json_str = self._extract_json(raw)

        try:
            return validate(json.loads(json_str))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("LLM returned an unusable query, retrying with repair prompt: %s", e)
            repair_prompt = f"""The previous JSON was invalid. Error: {e}
Original question: {text}

Fix the JSON to match the schema. Return ONLY valid JSON.
{QUERY_SCHEMA_DESC}
"""
            messages.append({"role": "assistant", "content": raw})
            messages.append({"role": "user", "content": repair_prompt})
            raw2 = self._chat(messages)
            json_str2 = self._extract_json(raw2)
            return validate(json.loads(json_str2))


class LLMQueryParser:
    """QueryParser backed by an external chat-completion service."""

    def __init__(self, client: Optional[LLMClient] = None) -> None:
        self.client = client or LLMClient()

    def parse(self, text: str, today: date) -> AvailabilityQuery:
        try:
            return self.client.parse_query_text(text, today)
        except httpx.HTTPStatusError as e:
            msg = f"LLM API error ({e.response.status_code})"
            if e.response.status_code == 401:
                msg += ": invalid or missing API key. Set OPENAI_API_KEY in your environment."
            raise ParserError(msg) from e
        except (httpx.HTTPError, ValueError, KeyError, IndexError, ValidationError) as e:
            raise ParserError(f"LLM parsing failed: {e}") from e
