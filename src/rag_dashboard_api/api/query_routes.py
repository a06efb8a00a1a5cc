from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from rag_dashboard_api.clients.graph_api_client import (
    GraphApiClient,
    GraphApiError,
    GraphNetworkError,
    GraphTimeoutError,
)
from rag_dashboard_api.schemas.query import QueryRequest, QueryResponse
from rag_dashboard_api.services.query import get_graph_client, submit_query

router = APIRouter(prefix="/api", tags=["query"])


@router.post(
    "/query",
    response_model=QueryResponse,
    summary="知识库问答",
    description="创建或复用会话线程，调用图执行后端，返回回答、上下文文档与来源标识。",
)
async def query(
    payload: QueryRequest,
    client: GraphApiClient = Depends(get_graph_client),
) -> QueryResponse:
    try:
        return await submit_query(client, payload)
    except GraphTimeoutError as exc:
        logger.warning("query.timeout thread_id={}", payload.thread_id)
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except GraphNetworkError as exc:
        logger.warning("query.network_error error={}", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except GraphApiError as exc:
        logger.warning("query.graph_error status={} message={}", exc.status_code, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get(
    "/query/health",
    summary="图执行后端健康检查",
    description="探测图执行后端 /ok 接口。",
)
async def query_backend_health(
    client: GraphApiClient = Depends(get_graph_client),
) -> dict[str, bool]:
    try:
        body = await client.health_check()
    except (GraphApiError, GraphNetworkError) as exc:
        logger.warning("query.health_failed error={}", exc.__class__.__name__)
        return {"ok": False}
    return {"ok": bool(body.get("ok", False))}
