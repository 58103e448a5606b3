from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

DocumentStatus = Literal["pending", "processing", "completed", "failed"]


def _as_str(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


class Section(BaseModel):
    title: str = ""
    content: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_str(v)


class TimelineEvent(BaseModel):
    date: str = ""
    event: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_str(v)


class Entities(BaseModel):
    people: list[str] = Field(default_factory=list)
    organizations: list[str] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)
    amounts: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _as_str_list(cls, v: Any) -> list[str]:
        return _str_list(v)


def _str_list(v: Any) -> list[str]:
    # LLM output is loose: tolerate null, scalars and non-string items
    if v is None:
        return []
    if not isinstance(v, list):
        v = [v]
    return [x if isinstance(x, str) else str(x) for x in v if x is not None]


class Analysis(BaseModel):
    """Structured fields extracted from a document's text by the LLM."""
    doc_type: str = "other"
    summary: str = ""
    sections: list[Section] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    questions_answered: list[str] = Field(default_factory=list)
    conclusions: list[str] = Field(default_factory=list)
    entities: Entities = Field(default_factory=Entities)
    relationships: list[str] = Field(default_factory=list)
    timeline: list[TimelineEvent] = Field(default_factory=list)

    @field_validator("key_points", "questions_answered", "conclusions", "relationships", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _str_list(v)

    @field_validator("sections", "timeline", mode="before")
    @classmethod
    def _objects(cls, v: Any) -> list[dict]:
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        return [x for x in v if isinstance(x, (dict, BaseModel))]

    @field_validator("entities", mode="before")
    @classmethod
    def _entities(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, Entities)) else {}


class Document(Analysis):
    id: int
    user_id: int | None = None
    filename: str
    file_type: Literal["pdf", "txt"]
    file_size: int = 0
    status: DocumentStatus = "pending"
    doc_type: str | None = None
    summary: str | None = None
    raw_text: str = ""
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("raw_text", mode="before")
    @classmethod
    def _raw_text(cls, v: Any) -> str:
        return v or ""

    def as_summary(self) -> dict:
        return self.model_dump(
            mode="json",
            include={"id", "filename", "file_type", "file_size", "status", "doc_type", "summary", "created_at"},
        )

    def as_full(self) -> dict:
        return self.model_dump(mode="json", exclude={"user_id", "updated_at"})


class User(BaseModel):
    id: int
    email: str
    name: str
    created_at: datetime | None = None


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""


class ChatRequest(BaseModel):
    question: str = ""
    messages: list[ChatTurn] = Field(default_factory=list)
    summary: str | None = None


class SourceRef(BaseModel):
    id: int
    filename: str


class QAResult(BaseModel):
    answer: str
    sources: list[SourceRef] = Field(default_factory=list)
    needs_summary: bool | None = None
    summary: str | None = None

    def to_response(self) -> dict:
        return self.model_dump(exclude_none=True)


class SingleScope(BaseModel):
    """One explicit document; the question text plays no part in retrieval."""
    user_id: int | None = None
    document_id: int


class MultiScope(BaseModel):
    """All of a user's completed documents, ranked by relevance to `query`."""
    user_id: int | None = None
    query: str
    limit: int = 5


RetrievalScope = Union[SingleScope, MultiScope]
