from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_current_user, qa_http_error
from app.core.config import settings
from app.core.errors import AnalysisError, QAError, UnsupportedFileType
from app.core.models import ChatRequest, SingleScope, User
from app.services import store_service
from app.services.ingest_service import SUPPORTED_TYPES, detect_file_type
from app.services.llm_factory import get_llm
from app.services.pipeline_service import ingest_upload
from app.services.rag_service import answer_question
from app.services.search_service import search_ids

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("")
async def list_docs(
    q: str | None = None,
    doc_type: str | None = None,
    sort: str = "newest",
    page: int = Query(1, ge=1),
    per_page: int = 20,
    user: User = Depends(get_current_user),
):
    per_page = max(1, min(per_page, 100))
    if q and q.strip():
        docs = store_service.get_documents(search_ids(user.id, q))
        if doc_type:
            docs = [d for d in docs if d.doc_type == doc_type]
        if sort == "oldest":
            docs.sort(key=lambda d: (d.created_at, d.id))
    else:
        docs = store_service.list_documents(user.id, status="completed", doc_type=doc_type,
                                            oldest_first=(sort == "oldest"))
    total = len(docs)
    start = (page - 1) * per_page
    return {
        "documents": [d.as_summary() for d in docs[start : start + per_page]],
        "meta": {"total": total, "page": page, "per_page": per_page},
    }


@router.get("/{doc_id}")
async def get_doc(doc_id: int, user: User = Depends(get_current_user)):
    doc = store_service.get_document(doc_id, user_id=user.id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"document": doc.as_full()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_doc(file: UploadFile | None = File(None), user: User = Depends(get_current_user)):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    file_type = detect_file_type(file.filename, file.content_type)
    if file_type not in SUPPORTED_TYPES:
        raise HTTPException(status_code=400, detail="Only PDF and TXT files are supported")

    data = await file.read()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File is too large")

    try:
        doc = await ingest_upload(user.id, file.filename or f"upload.{file_type}", file_type, data, llm=get_llm())
    except (UnsupportedFileType, AnalysisError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=422, detail=f"{type(e).__name__}: {e}")
    return {"document": doc.as_full()}


@router.delete("/{doc_id}")
async def delete_doc(doc_id: int, user: User = Depends(get_current_user)):
    if not store_service.delete_document(doc_id, user_id=user.id):
        raise HTTPException(status_code=404, detail="Document not found")
    return {"success": True}


@router.post("/{doc_id}/chat")
async def chat_with_doc(doc_id: int, req: ChatRequest, user: User = Depends(get_current_user)):
    """Q&A against one document (single-document mode)."""
    if store_service.get_document(doc_id, user_id=user.id) is None:
        raise HTTPException(status_code=404, detail="Document not found")
    if not req.question.strip():
        raise HTTPException(status_code=422, detail="Question is required")

    try:
        result = await answer_question(
            req.question,
            SingleScope(user_id=user.id, document_id=doc_id),
            messages=req.messages,
            summary=req.summary,
            llm=get_llm(),
        )
    except QAError as e:
        raise qa_http_error(e)
    return result.to_response()
