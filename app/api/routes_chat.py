from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_current_user, qa_http_error
from app.core.config import settings
from app.core.errors import QAError
from app.core.models import ChatRequest, MultiScope, User
from app.services.llm_factory import get_llm
from app.services.rag_service import answer_question

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/qa")
async def qa(req: ChatRequest, user: User = Depends(get_current_user)):
    """RAG Q&A across all of the caller's documents.

    The client carries the conversation: `messages` are the turns since the
    last summary and `summary` is that summary. When the response includes
    `needs_summary`, replace both with the returned `summary` and an empty list.
    """
    if not (req.question or "").strip():
        raise HTTPException(status_code=422, detail="Question is required")

    try:
        result = await answer_question(
            req.question,
            MultiScope(user_id=user.id, query=req.question, limit=settings.QA_TOP_K),
            messages=req.messages,
            summary=req.summary,
            llm=get_llm(),
        )
    except QAError as e:
        raise qa_http_error(e)
    return result.to_response()
