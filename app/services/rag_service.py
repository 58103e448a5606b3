"""Question answering over the user's documents.

1. retrieve documents for the scope (one document, or BM25 over all of them)
2. render them into a bounded context
3. ask the LLM to answer only from that context, as JSON with cited filenames
4. reorder sources by the model's citations
5. summarize the conversation once the carried history hits the limit
"""

from __future__ import annotations

import logging

from app.adapters.llm.base import LLM
from app.core.config import settings
from app.core.errors import ProviderError, QAError
from app.core.models import ChatTurn, Document, QAResult, RetrievalScope, SingleScope
from app.services.citation_service import rank_sources
from app.services.context_service import build_context
from app.services.conversation_service import build_summary_messages, needs_summarization, render_history
from app.services.llm_factory import get_llm
from app.services.response_parser import parse_response
from app.services.retrieve_service import retrieve

logger = logging.getLogger(__name__)

NOT_FOUND_ANSWER = "This document was not found or is still being processed."
NO_DOCUMENTS_ANSWER = (
    "I don't have any documents to search. Please upload some documents first, "
    "then I can answer questions about them."
)
HISTORY_ACK = "I understand the conversation history. I'll use this context to answer your next question."


def build_system_prompt(docs: list[Document]) -> str:
    doc_list = ", ".join(d.filename for d in docs)
    return f"""You are a helpful assistant that answers questions based ONLY on the provided document context.

Available documents: {doc_list}

Rules:
- Only use information from the provided context
- If the answer isn't in the context, say "I couldn't find this information in your documents"
- Be concise and direct
- Take into account any conversation history provided to give contextual answers

IMPORTANT: You MUST respond with valid JSON in this exact format:
{{
  "answer": "Your detailed answer here, formatted with markdown if needed",
  "primary_sources": ["most_relevant_doc.pdf", "second_most_relevant.pdf"]
}}

The "primary_sources" array should list the document filenames in order of how much you used them to answer the question.
Only include documents you actually referenced. If you only used one document, only list that one."""


def build_user_prompt(question: str, context: str) -> str:
    return f"""Based on the following documents, please answer the question.

{context}

Question: {question}"""


def build_messages(question: str, docs: list[Document], context: str, history: str) -> list[dict]:
    messages = [{"role": "system", "content": build_system_prompt(docs)}]
    if history:
        # History rides in as an exchange the model has already acknowledged, not as a new question.
        messages.append({"role": "user", "content": f"Conversation history for context:\n\n{history}"})
        messages.append({"role": "assistant", "content": HISTORY_ACK})
    messages.append({"role": "user", "content": build_user_prompt(question, context)})
    return messages


async def answer_question(
    question: str,
    scope: RetrievalScope,
    messages: list[ChatTurn] | None = None,
    summary: str | None = None,
    llm: LLM | None = None,
) -> QAResult:
    turns = list(messages or [])
    single = isinstance(scope, SingleScope)

    docs = retrieve(scope)
    if not docs:
        return QAResult(answer=NOT_FOUND_ANSWER if single else NO_DOCUMENTS_ANSWER, sources=[])

    context = build_context(docs, single_document=single)
    prompt = build_messages(question, docs, context, render_history(summary, turns))

    llm = llm or get_llm()
    try:
        raw = await llm.complete(prompt)
    except ProviderError as e:
        raise QAError(f"Failed to get answer: {e}") from e

    parsed = parse_response(raw)
    logger.debug("Answer parsed via %s; cited=%s", parsed.state.value, parsed.primary_sources)
    result = QAResult(answer=parsed.answer, sources=rank_sources(docs, parsed.primary_sources))

    # Evaluated on the history carried in, not counting this exchange.
    if needs_summarization(len(turns), settings.QA_MESSAGE_LIMIT):
        result.needs_summary = True
        try:
            result.summary = await llm.complete(
                build_summary_messages(turns, question, parsed.answer, prior_summary=summary)
            )
        except ProviderError as e:
            # Answer stands without a summary; the client still holds the full history.
            logger.warning("Conversation summarization failed, returning answer without summary: %s", e)

    return result
