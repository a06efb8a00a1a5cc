from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from langchain_core.documents import Document
from loguru import logger

from rag_dashboard_api.clients.graph_api_client import GraphApiClient, GraphApiError
from rag_dashboard_api.config import settings
from rag_dashboard_api.schemas.query import QueryRequest, QueryResponse

DEFAULT_STRATEGY = "cohere_rerank"
PROVENANCE_KEYS: tuple[str, ...] = ("file_path", "source")


def to_document(raw: Any) -> Document:
    if isinstance(raw, Document):
        return raw
    if not isinstance(raw, dict):
        return Document(page_content=str(raw))
    return Document(
        page_content=str(raw.get("page_content") or ""),
        metadata=dict(raw.get("metadata") or {}),
        id=raw.get("id"),
    )


def extract_provenance_ids(documents: Iterable[Document]) -> list[str]:
    ids: dict[str, None] = {}
    for doc in documents:
        for key in PROVENANCE_KEYS:
            value = doc.metadata.get(key)
            if value:
                ids[str(value)] = None
    return list(ids)


async def submit_query(client: GraphApiClient, payload: QueryRequest) -> QueryResponse:
    thread_id = (payload.thread_id or "").strip()
    if not thread_id:
        thread = await client.create_thread()
        thread_id = str(thread.get("thread_id") or "").strip()
        if not thread_id:
            raise GraphApiError("thread creation returned no thread_id", details=thread)
    logger.info("query.submit thread_id={} retriever={}", thread_id, payload.retriever)

    result = await client.invoke_graph(thread_id, payload.question, timeout_seconds=payload.timeout_seconds)
    documents = [to_document(item) for item in result.get("context") or []]
    response = QueryResponse(
        answer=str(result.get("response") or ""),
        contexts=documents,
        # backend only serves cohere_rerank for now
        strategy=payload.retriever or DEFAULT_STRATEGY,
        manifests=extract_provenance_ids(documents),
        thread_id=thread_id,
    )
    logger.info(
        "query.done thread_id={} contexts={} manifests={}",
        thread_id,
        len(documents),
        len(response.manifests),
    )
    return response


def get_graph_client() -> GraphApiClient:
    return GraphApiClient(
        settings.graph_api_base_url,
        assistant_id=settings.graph_assistant_id,
        timeout_seconds=settings.graph_api_timeout_seconds,
    )
