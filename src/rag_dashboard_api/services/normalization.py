from __future__ import annotations

from rag_dashboard_api.services.errors import RetrieverValidationError

VALID_RETRIEVERS: tuple[str, ...] = ("naive", "bm25", "ensemble", "cohere_rerank")


def normalize_retriever_name(name: str | None) -> str:
    """Map e.g. "Cohere Rerank" to "cohere_rerank" and "BM25" to "bm25"."""
    return (name or "").lower().replace(" ", "_")


def ensure_valid_retriever(retriever: str) -> str:
    if retriever not in VALID_RETRIEVERS:
        raise RetrieverValidationError(f"Invalid retriever. Must be one of: {', '.join(VALID_RETRIEVERS)}")
    return retriever
