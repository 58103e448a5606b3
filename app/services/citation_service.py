from __future__ import annotations

from app.core.models import Document, SourceRef


def format_sources(docs: list[Document]) -> list[SourceRef]:
    return [SourceRef(id=d.id, filename=d.filename) for d in docs]


def rank_sources(docs: list[Document], primary_sources: list[str]) -> list[SourceRef]:
    """Order retrieved documents by the model's own citation ranking.

    Cited filenames come first in the order the model listed them; documents
    it didn't cite follow in retrieval order. Unknown or repeated filenames
    are skipped, so every retrieved document appears exactly once.
    """
    if not primary_sources:
        return format_sources(docs)

    remaining = list(docs)
    ranked: list[Document] = []
    for filename in primary_sources:
        for d in remaining:
            if d.filename == filename:
                ranked.append(d)
                remaining.remove(d)
                break
    return format_sources(ranked + remaining)
