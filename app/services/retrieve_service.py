import logging

from app.core.models import Document, MultiScope, RetrievalScope, SingleScope
from app.services import store_service
from app.services.search_service import search_ids

logger = logging.getLogger(__name__)


def retrieve(scope: RetrievalScope) -> list[Document]:
    """Documents to answer from, in retrieval order.

    Single: the one completed document owned by the user, or nothing.
    Multi: BM25 matches for the query; with no match, the newest documents
    instead so there is always something to answer from.
    """
    if isinstance(scope, SingleScope):
        doc = store_service.get_document(scope.document_id, user_id=scope.user_id)
        if doc is None or doc.status != "completed":
            return []
        return [doc]

    if isinstance(scope, MultiScope):
        ids = search_ids(scope.user_id, scope.query, limit=scope.limit)
        if ids:
            return store_service.get_documents(ids)
        logger.debug("No relevance match for %r; falling back to newest documents", scope.query)
        return store_service.list_documents(scope.user_id, status="completed", limit=scope.limit)

    raise TypeError(f"Unknown retrieval scope: {type(scope).__name__}")
