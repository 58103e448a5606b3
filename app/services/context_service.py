from __future__ import annotations

from app.core.config import settings
from app.core.models import Document

DOC_SEPARATOR = "\n\n---\n\n"


def _joined(items: list[str]) -> str:
    return "; ".join(i for i in items if i)


def render_document(doc: Document, excerpt_chars: int) -> str:
    parts = [f"Document: {doc.filename}", f"Type: {doc.doc_type or 'other'}"]
    if (doc.summary or "").strip():
        parts.append(f"Summary: {doc.summary}")
    sections = [s for s in doc.sections if s.title.strip() or s.content.strip()]
    if sections:
        parts.append("Sections:\n" + "\n".join(f"- {s.title}: {s.content}" for s in sections))
    if _joined(doc.key_points):
        parts.append(f"Key Points: {_joined(doc.key_points)}")
    if _joined(doc.questions_answered):
        parts.append(f"Questions this document answers: {_joined(doc.questions_answered)}")
    if _joined(doc.conclusions):
        parts.append(f"Conclusions: {_joined(doc.conclusions)}")
    if _joined(doc.relationships):
        parts.append(f"Relationships: {_joined(doc.relationships)}")
    timeline = [t for t in doc.timeline if t.date.strip() or t.event.strip()]
    if timeline:
        parts.append("Timeline:\n" + "\n".join(f"- {t.date}: {t.event}" for t in timeline))
    parts.append(f"Content excerpt:\n{(doc.raw_text or '')[:excerpt_chars]}")
    return "\n".join(parts)


def build_context(docs: list[Document], single_document: bool) -> str:
    """Render retrieved documents into the prompt context.

    A single document gets a much deeper raw-text excerpt than each document
    in multi-document mode, where up to QA_TOP_K documents share the prompt.
    """
    limit = settings.CONTEXT_CHARS_SINGLE if single_document else settings.CONTEXT_CHARS_MULTI
    return DOC_SEPARATOR.join(render_document(d, limit) for d in docs)
