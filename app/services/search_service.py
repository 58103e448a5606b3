"""Searchable token index and relevance lookup.

Each completed document stores a normalized, deduplicated token list built
from its analysis fields and the head of its raw text. Relevance is BM25 over
those token lists, computed per request over the caller's completed documents.
"""

from __future__ import annotations

import logging
import re

from app.adapters.bm25.bm25 import BM25Index
from app.core.config import settings
from app.core.models import Document
from app.services import store_service

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\s]")

# Words a text-search query parser would drop from a plain-language question.
STOP_WORDS = frozenset(
    """
    a an and are as at be been but by can could did do does for from had has have how i if in
    is it its me my no not of on or our should so than that the their them then there these
    they this to was we were what when where which who whom why will with would you your
    """.split()
)


def tokenize(text: str) -> list[str]:
    """Lowercased alphanumeric tokens of length >= 2, byte-capped, deduplicated in order."""
    seen: set[str] = set()
    out: list[str] = []
    for w in _NON_ALNUM_RE.sub(" ", text or "").lower().split():
        if len(w) < 2 or len(w.encode("utf-8")) > settings.SEARCH_MAX_TOKEN_BYTES:
            continue
        if w in seen:
            continue
        seen.add(w)
        out.append(w)
    return out


def searchable_text(doc: Document) -> str:
    parts = [
        doc.filename,
        doc.summary,
        " ".join(f"{s.title} {s.content}" for s in doc.sections),
        " ".join(doc.key_points),
        " ".join(doc.questions_answered),
        " ".join(doc.conclusions),
        " ".join(doc.relationships),
        (doc.raw_text or "")[: settings.SEARCH_RAW_TEXT_CHARS],
    ]
    return " ".join(p for p in parts if p)


def build_search_tokens(doc: Document) -> list[str]:
    return tokenize(searchable_text(doc))[: settings.SEARCH_MAX_TOKENS]


def query_tokens(query: str) -> list[str]:
    return [t for t in tokenize(query) if t not in STOP_WORDS]


def refresh_search_index(doc: Document) -> bool:
    """Rebuild and store the document's token index.

    Failures are logged and swallowed: the document stays usable and is only
    reachable through the recency fallback.
    """
    try:
        store_service.save_search_tokens(doc.id, build_search_tokens(doc))
    except Exception as e:
        logger.warning("Search index update failed for document %s: %s", doc.id, e)
        return False
    return True


def search_ids(user_id: int | None, query: str, limit: int | None = None) -> list[int]:
    """Ids of completed documents in scope matching `query`, most relevant first.

    `limit=None` returns every match.
    """
    terms = query_tokens(query)
    if not terms:
        return []
    rows = store_service.list_search_rows(user_id)
    index = BM25Index()
    index.build(rows)
    hits = index.search(terms, top_k=limit if limit is not None else len(rows))
    return [h["doc_id"] for h in hits]
