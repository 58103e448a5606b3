from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from app.adapters.llm.base import LLM
from app.core.config import settings
from app.core.errors import AnalysisError, ProviderError
from app.core.models import Analysis
from app.services.llm_factory import get_llm

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?")

SYSTEM_PROMPT = """You are a document analyzer. Analyze the provided document and return a JSON response with:

doc_type: One of: receipt, report, article, assignment, email, contract, notes, other

summary: A comprehensive summary of the document covering the main topic, purpose, and key findings. Be thorough.

sections: Array of main topics/sections found in the document. Each section should have:
  - title: Section or topic name
  - content: Summary of what this section covers

key_points: Array of bullet points capturing all important ideas (as many as needed)

questions_answered: Array of questions that this document can answer. Think about what someone might ask about this document's content.

conclusions: Array of conclusions, recommendations, or key takeaways from the document

entities: Object with arrays for:
  - people: Names of people mentioned
  - organizations: Company/org names
  - dates: Important dates mentioned
  - amounts: Money amounts, quantities
  - locations: Places mentioned

relationships: Array of relationships between entities (if applicable). Each should describe how two entities are connected. Example: "John Smith is the CEO of Acme Corp"

timeline: Array of events in chronological order (if applicable). Each should have:
  - date: When it happened (or relative timing like "first", "then", "finally")
  - event: What happened

Respond ONLY with valid JSON, no markdown code blocks or other text."""


def build_messages(raw_text: str) -> list[dict]:
    truncated = (raw_text or "")[: settings.ANALYSIS_MAX_CHARS]
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Analyze this document:\n\n{truncated}"},
    ]


def parse_analysis(response: str) -> Analysis:
    cleaned = _FENCE_RE.sub("", response or "").strip()
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise AnalysisError(f"Failed to parse LLM response: {e}") from e
    if not isinstance(data, dict):
        raise AnalysisError("Failed to parse LLM response: expected a JSON object")
    # null from the model means "use the default"
    data = {k: v for k, v in data.items() if v is not None}
    try:
        return Analysis(**data)
    except ValidationError as e:
        raise AnalysisError(f"Failed to parse LLM response: {e}") from e


async def analyze_document(raw_text: str, llm: LLM | None = None) -> Analysis:
    """One-shot structured extraction of a document's text."""
    llm = llm or get_llm()
    try:
        response = await llm.complete(build_messages(raw_text))
    except ProviderError as e:
        raise AnalysisError(str(e)) from e
    return parse_analysis(response)
