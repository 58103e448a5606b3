"""Lenient extraction of `{answer, primary_sources}` from a model completion.

Models asked for strict JSON still wrap it in prose or ```json fences, so
parsing runs through three states, each tried only if the previous failed:

  STRICT   decode the whole (stripped) completion
  SPAN     decode from the first "{" to the last "}"
  FALLBACK the raw completion is the answer, no cited sources

Parsing never raises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParseState(str, Enum):
    STRICT = "strict"
    SPAN = "span"
    FALLBACK = "fallback"


@dataclass
class ParsedAnswer:
    answer: str
    primary_sources: list[str] = field(default_factory=list)
    state: ParseState = ParseState.FALLBACK


def _decode_object(text: str) -> dict | None:
    try:
        value = json.loads(text)
    except (ValueError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def _brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _from_object(obj: dict[str, Any], raw: str, state: ParseState) -> ParsedAnswer:
    answer = obj.get("answer")
    if not isinstance(answer, str) or not answer:
        answer = raw
    sources = obj.get("primary_sources")
    if not isinstance(sources, list):
        sources = []
    return ParsedAnswer(
        answer=answer,
        primary_sources=[s for s in sources if isinstance(s, str)],
        state=state,
    )


def parse_response(raw: str) -> ParsedAnswer:
    raw = raw or ""
    state = ParseState.STRICT
    while True:
        if state is ParseState.STRICT:
            obj = _decode_object(raw.strip())
            if obj is not None:
                return _from_object(obj, raw, state)
            state = ParseState.SPAN
        elif state is ParseState.SPAN:
            span = _brace_span(raw)
            obj = _decode_object(span) if span is not None else None
            if obj is not None:
                return _from_object(obj, raw, state)
            state = ParseState.FALLBACK
        else:
            return ParsedAnswer(answer=raw, primary_sources=[], state=ParseState.FALLBACK)
