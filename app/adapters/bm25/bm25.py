from rank_bm25 import BM25Plus

class BM25Index:
    """BM25 over pre-tokenized documents.

    BM25Plus keeps idf positive even when a term occurs in every document,
    which matters for corpora of one or two documents.
    """

    def __init__(self):
        self._bm25 = None
        self._doc_ids = []
        self._token_sets = []

    def build(self, docs: list[tuple[int, list[str]]]):
        self._doc_ids = [doc_id for doc_id, _ in docs]
        self._token_sets = [set(tokens) for _, tokens in docs]
        corpus = [tokens for _, tokens in docs]
        # rank_bm25 divides by the average document length
        self._bm25 = BM25Plus(corpus) if corpus and any(corpus) else None

    def search(self, query_tokens: list[str], top_k: int = 20) -> list[dict]:
        """Documents sharing at least one token with the query, best first.

        Equal scores keep build order.
        """
        if not self._bm25 or not query_tokens:
            return []
        scores = self._bm25.get_scores(query_tokens)
        wanted = set(query_tokens)
        matched = [i for i, toks in enumerate(self._token_sets) if toks & wanted]
        ranked = sorted(matched, key=lambda i: -scores[i])[:top_k]
        return [{"doc_id": self._doc_ids[i], "bm25_score": float(scores[i])} for i in ranked]
