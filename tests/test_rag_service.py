import json

import pytest

from app.core.errors import ProviderError, ProviderTimeout, QAError
from app.core.models import ChatTurn, MultiScope, SingleScope
from app.services.conversation_service import SUMMARY_SYSTEM_PROMPT
from app.services.rag_service import HISTORY_ACK, NO_DOCUMENTS_ANSWER, NOT_FOUND_ANSWER, answer_question


def _history(pairs):
    turns = []
    for i in range(pairs):
        turns.append(ChatTurn(role="user", content=f"question {i}"))
        turns.append(ChatTurn(role="assistant", content=f"answer {i}"))
    return turns


@pytest.mark.asyncio
async def test_single_document_answer(make_document, user, fake_llm):
    doc = make_document("receipt.pdf", user_id=user.id, summary="Grocery receipt", raw_text="r" * 9000)
    llm = fake_llm(['{"answer": "$42", "primary_sources": ["receipt.pdf"]}'])

    result = await answer_question("What is the total?", SingleScope(user_id=user.id, document_id=doc.id), llm=llm)

    assert result.answer == "$42"
    assert [s.id for s in result.sources] == [doc.id]
    assert result.needs_summary is None
    assert len(llm.calls) == 1
    final = llm.calls[0][-1]["content"]
    assert "Summary: Grocery receipt" in final
    assert "r" * 8000 in final and "r" * 8001 not in final
    assert final.rstrip().endswith("Question: What is the total?")


@pytest.mark.asyncio
async def test_processing_document_is_not_sent_to_llm(make_document, user, fake_llm):
    doc = make_document("scan.pdf", user_id=user.id, status="processing")
    llm = fake_llm()

    result = await answer_question("Anything?", SingleScope(user_id=user.id, document_id=doc.id), llm=llm)

    assert result.to_response() == {"answer": NOT_FOUND_ANSWER, "sources": []}
    assert llm.calls == []


@pytest.mark.asyncio
async def test_empty_corpus(db, user, fake_llm):
    llm = fake_llm()
    result = await answer_question("Anything?", MultiScope(user_id=user.id, query="Anything?"), llm=llm)
    assert result.answer.startswith("I don't have any documents to search")
    assert result.answer == NO_DOCUMENTS_ANSWER
    assert result.sources == []
    assert llm.calls == []


@pytest.mark.asyncio
async def test_sources_reordered_by_citations(make_document, user, fake_llm):
    a = make_document("a.pdf", user_id=user.id, summary="zeppelin history")
    b = make_document("b.pdf", user_id=user.id, summary="zeppelin engines")
    llm = fake_llm(['```json\n{"answer":"X","primary_sources":["b.pdf","a.pdf"]}\n```'])

    result = await answer_question("zeppelin", MultiScope(user_id=user.id, query="zeppelin"), llm=llm)

    assert result.answer == "X"
    assert [s.filename for s in result.sources] == ["b.pdf", "a.pdf"]
    assert {s.id for s in result.sources} == {a.id, b.id}


@pytest.mark.asyncio
async def test_unparseable_completion_becomes_answer(make_document, user, fake_llm):
    make_document("a.pdf", user_id=user.id, summary="zeppelin")
    llm = fake_llm(["Plain prose answer."])
    result = await answer_question("zeppelin", MultiScope(user_id=user.id, query="zeppelin"), llm=llm)
    assert result.answer == "Plain prose answer."
    assert [s.filename for s in result.sources] == ["a.pdf"]


@pytest.mark.asyncio
async def test_prompt_shape_without_history(make_document, user, fake_llm):
    make_document("a.pdf", user_id=user.id, summary="zeppelin")
    llm = fake_llm()
    await answer_question("zeppelin?", MultiScope(user_id=user.id, query="zeppelin?"), llm=llm)

    sent = llm.calls[0]
    assert [m["role"] for m in sent] == ["system", "user"]
    assert "Available documents: a.pdf" in sent[0]["content"]
    assert '"primary_sources"' in sent[0]["content"]


@pytest.mark.asyncio
async def test_history_injected_as_acknowledged_exchange(make_document, user, fake_llm):
    make_document("a.pdf", user_id=user.id, summary="zeppelin")
    llm = fake_llm()
    await answer_question(
        "and then?",
        MultiScope(user_id=user.id, query="and then?"),
        messages=_history(1),
        summary="Earlier we discussed airships.",
        llm=llm,
    )

    sent = llm.calls[0]
    assert [m["role"] for m in sent] == ["system", "user", "assistant", "user"]
    assert sent[1]["content"].startswith("Conversation history for context:")
    assert "Previous conversation summary:\nEarlier we discussed airships." in sent[1]["content"]
    assert "User: question 0\nAssistant: answer 0" in sent[1]["content"]
    assert sent[2]["content"] == HISTORY_ACK


@pytest.mark.asyncio
async def test_summarizes_at_twenty_turns(make_document, user, fake_llm):
    doc = make_document("a.pdf", user_id=user.id, summary="zeppelin")
    llm = fake_llm(['{"answer": "A", "primary_sources": []}', "We discussed zeppelins."])

    result = await answer_question(
        "next?", SingleScope(user_id=user.id, document_id=doc.id), messages=_history(10), llm=llm
    )

    assert result.needs_summary is True
    assert result.summary == "We discussed zeppelins."
    assert len(llm.calls) == 2
    assert llm.calls[1][0] == {"role": "system", "content": SUMMARY_SYSTEM_PROMPT}
    assert llm.calls[1][0]["content"] != llm.calls[0][0]["content"]
    assert "User: next?\nAssistant: A" in llm.calls[1][1]["content"]


@pytest.mark.asyncio
async def test_no_summary_below_threshold(make_document, user, fake_llm):
    doc = make_document("a.pdf", user_id=user.id)
    llm = fake_llm()
    history = _history(10)[:-1]
    result = await answer_question("q", SingleScope(user_id=user.id, document_id=doc.id), messages=history, llm=llm)
    assert result.needs_summary is None
    assert "summary" not in result.to_response()
    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_generation_failure_raises_qa_error(make_document, user, fake_llm):
    doc = make_document("a.pdf", user_id=user.id)
    llm = fake_llm([ProviderTimeout("OpenRouter API timeout - the request took too long")])
    with pytest.raises(QAError, match="Failed to get answer: OpenRouter API timeout"):
        await answer_question("q", SingleScope(user_id=user.id, document_id=doc.id), llm=llm)


@pytest.mark.asyncio
async def test_summary_failure_keeps_answer(make_document, user, fake_llm):
    doc = make_document("a.pdf", user_id=user.id)
    llm = fake_llm([json.dumps({"answer": "fine", "primary_sources": []}), ProviderError("boom", status_code=502)])

    result = await answer_question(
        "q", SingleScope(user_id=user.id, document_id=doc.id), messages=_history(10), llm=llm
    )

    assert result.answer == "fine"
    assert result.needs_summary is True
    assert result.summary is None
