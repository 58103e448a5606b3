import logging

from app.adapters.llm.base import LLM
from app.core.errors import AnalysisError, UnsupportedFileType
from app.core.models import Document
from app.services import store_service
from app.services.analysis_service import analyze_document
from app.services.ingest_service import extract_text
from app.services.search_service import refresh_search_index

logger = logging.getLogger(__name__)


async def process_document(doc: Document, data: bytes, llm: LLM | None = None) -> Document:
    """Run a stored document through extraction, analysis and indexing.

    `processing -> completed`, or `failed` with `error_message` set. Expected
    failures (bad file, unusable analysis) are re-raised for the caller to
    report; anything else is re-raised too, after the document is marked failed.
    """
    store_service.update_document(doc.id, status="processing")
    try:
        # 1) text
        raw_text = extract_text(data, doc.file_type)
        store_service.update_document(doc.id, raw_text=raw_text)

        # 2) llm analysis
        analysis = await analyze_document(raw_text, llm=llm)
        store_service.save_analysis(doc.id, analysis, status="completed")
    except (UnsupportedFileType, AnalysisError) as e:
        store_service.update_document(doc.id, status="failed", error_message=str(e))
        raise
    except Exception as e:
        logger.exception("Document processing error for %s", doc.id)
        store_service.update_document(doc.id, status="failed", error_message=f"{type(e).__name__}: {e}")
        raise

    # 3) search index (never fails the document)
    doc = store_service.get_document(doc.id)
    refresh_search_index(doc)
    return doc


async def ingest_upload(user_id: int | None, filename: str, file_type: str, data: bytes,
                        llm: LLM | None = None) -> Document:
    doc = store_service.create_document(user_id, filename, file_type, file_size=len(data), status="processing")
    logger.info("Processing upload %s (%s, %d bytes) as document %s", filename, file_type, len(data), doc.id)
    return await process_document(doc, data, llm=llm)
