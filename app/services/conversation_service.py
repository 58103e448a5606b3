"""Conversation memory carried by the client.

Nothing is kept server-side: every request brings its recent turns and,
once the conversation has been compacted, the summary that replaced the
older ones. When the turns carried in reach the limit, the answer comes back
with a fresh summary and the client starts over from it.
"""

from __future__ import annotations

from typing import Iterable

from app.core.config import settings
from app.core.models import ChatTurn

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes conversations concisely "
    "while preserving important context."
)


def needs_summarization(turn_count: int, limit: int | None = None) -> bool:
    """True once the history holds `limit` Q/A pairs (2 messages each)."""
    pairs = settings.QA_MESSAGE_LIMIT if limit is None else limit
    return turn_count >= pairs * 2


def render_transcript(turns: Iterable[ChatTurn]) -> str:
    return "\n".join(
        f"User: {t.content}" if t.role == "user" else f"Assistant: {t.content}"
        for t in turns
    )


def render_history(summary: str | None, turns: list[ChatTurn]) -> str:
    parts = []
    if summary and summary.strip():
        parts.append(f"Previous conversation summary:\n{summary}")
    if turns:
        parts.append(f"Recent conversation:\n{render_transcript(turns)}")
    return "\n\n".join(parts)


def build_summary_messages(turns: list[ChatTurn], question: str, answer: str,
                           prior_summary: str | None = None) -> list[dict]:
    conversation = render_transcript(turns)
    latest = f"User: {question}\nAssistant: {answer}"
    conversation = f"{conversation}\n{latest}" if conversation else latest
    prev = f"Previous summary: {prior_summary}\n\n" if prior_summary and prior_summary.strip() else ""

    prompt = (
        "Please summarize the following conversation about a document.\n"
        "Capture the key topics discussed, important information revealed, and any conclusions reached.\n"
        "Keep the summary concise but comprehensive enough to continue the conversation.\n\n"
        f"{prev}Conversation:\n{conversation}\n\n"
        "Provide a summary in 2-3 paragraphs."
    )
    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
