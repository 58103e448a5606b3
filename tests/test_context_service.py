from app.core.models import Document
from app.services.context_service import DOC_SEPARATOR, build_context


def _doc(**kw):
    base = dict(id=1, filename="a.pdf", file_type="pdf", status="completed", doc_type="report",
                summary="A summary.", raw_text="x" * 20000)
    base.update(kw)
    return Document(**base)


def test_single_document_excerpt_is_8000_chars():
    ctx = build_context([_doc()], single_document=True)
    excerpt = ctx.split("Content excerpt:\n", 1)[1]
    assert excerpt == "x" * 8000


def test_multi_document_excerpt_is_2000_chars_each():
    docs = [_doc(id=1, filename="a.pdf"), _doc(id=2, filename="b.pdf")]
    ctx = build_context(docs, single_document=False)
    blocks = ctx.split(DOC_SEPARATOR)
    assert len(blocks) == 2
    for block in blocks:
        assert block.split("Content excerpt:\n", 1)[1] == "x" * 2000


def test_empty_fields_are_omitted():
    ctx = build_context([_doc(raw_text="body")], single_document=True)
    assert ctx == "Document: a.pdf\nType: report\nSummary: A summary.\nContent excerpt:\nbody"
    for header in ("Sections:", "Key Points:", "Questions this document answers:",
                   "Conclusions:", "Relationships:", "Timeline:"):
        assert header not in ctx


def test_blank_summary_and_items_are_omitted():
    doc = _doc(
        raw_text="body",
        summary="  ",
        sections=[{"title": "", "content": ""}, {"title": "Scope", "content": ""}],
        timeline=[{"date": "", "event": " "}],
    )
    ctx = build_context([doc], single_document=True)
    assert ctx == "Document: a.pdf\nType: report\nSections:\n- Scope: \nContent excerpt:\nbody"
    assert "Summary:" not in ctx
    assert "Timeline:" not in ctx


def test_all_fields_rendered_in_order():
    doc = _doc(
        raw_text="body",
        sections=[{"title": "Intro", "content": "Why"}],
        key_points=["k1", "k2"],
        questions_answered=["What is it?"],
        conclusions=["Done"],
        relationships=["A owns B"],
        timeline=[{"date": "2024-01-01", "event": "Signed"}],
    )
    ctx = build_context([doc], single_document=True)
    assert ctx == (
        "Document: a.pdf\n"
        "Type: report\n"
        "Summary: A summary.\n"
        "Sections:\n- Intro: Why\n"
        "Key Points: k1; k2\n"
        "Questions this document answers: What is it?\n"
        "Conclusions: Done\n"
        "Relationships: A owns B\n"
        "Timeline:\n- 2024-01-01: Signed\n"
        "Content excerpt:\nbody"
    )
