"""Shared fixtures: a throwaway SQLite store and a scripted LLM."""
import os
import tempfile

# Must be set before app.core.config is imported anywhere.
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(prefix="documind-"), "test.sqlite3"))
os.environ.setdefault("ENV", "test")

import pytest

from app.adapters.llm.base import LLM
from app.core.config import settings
from app.core.models import Analysis
from app.services import store_service
from app.services.search_service import refresh_search_index


class FakeLLM(LLM):
    """Returns queued replies in order and records every message list it was sent.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    async def complete(self, messages):
        self.calls.append(messages)
        if not self.replies:
            return '{"answer": "ok", "primary_sources": []}'
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_PATH", str(tmp_path / "documind.sqlite3"))
    store_service.init_db()
    return settings.DB_PATH


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def user(db):
    return store_service.create_user("ada@example.com", "Ada", None)


@pytest.fixture
def make_document(db):
    """Create a document; completed ones get analysis fields and a search index."""

    def _make(filename="notes.txt", user_id=None, status="completed", raw_text="", index=True, **analysis):
        file_type = "pdf" if filename.endswith(".pdf") else "txt"
        doc = store_service.create_document(user_id, filename, file_type, file_size=len(raw_text),
                                            status="processing")
        store_service.update_document(doc.id, raw_text=raw_text)
        if status == "completed":
            store_service.save_analysis(doc.id, Analysis(**analysis), status="completed")
        else:
            store_service.update_document(doc.id, status=status)
        doc = store_service.get_document(doc.id)
        if status == "completed" and index:
            refresh_search_index(doc)
        return doc

    return _make
