from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from rag_dashboard_api.services.errors import ParseError, RemoteFetchError, RemoteTimeoutError
from rag_dashboard_api.services.record_source import LocalFileRecordSource, get_record_source


def _use_source(app: FastAPI, source: object) -> None:
    app.dependency_overrides[get_record_source] = lambda: source


@pytest.mark.anyio
async def test_evaluation_metrics_returns_grouped_summaries(
    fake_record_source: Callable[..., Any],
    metric_row: Callable[..., dict[str, Any]],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    _use_source(
        dashboard_app,
        fake_record_source(
            [
                metric_row("Cohere Rerank", "q1", (1.0, 1.0, 1.0, 0.8)),
                metric_row("naive", "q1", (0.8, 0.8, 0.8, 0.8)),
                metric_row("cohere_rerank", "q2", (1.0, 1.0, 1.0, 1.0)),
            ]
        ),
    )

    resp = await dashboard_async_client.get("/api/evaluation/metrics")

    assert resp.status_code == 200
    body = resp.json()
    assert [item["retriever"] for item in body["metrics"]] == ["cohere_rerank", "naive"]
    cohere = body["metrics"][0]
    assert set(cohere) == {
        "retriever",
        "faithfulness",
        "answer_relevancy",
        "context_precision",
        "context_recall",
        "average",
    }
    assert cohere["context_recall"] == pytest.approx(0.9)
    assert cohere["average"] == pytest.approx(0.975)
    assert body["bestPerformer"]["retriever"] == "cohere_rerank"
    assert body["manifest"]["llm"]["model"] == "gpt-4o-mini"


@pytest.mark.anyio
async def test_evaluation_detailed_returns_camel_case_payload(
    fake_record_source: Callable[..., Any],
    metric_row: Callable[..., dict[str, Any]],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    _use_source(
        dashboard_app,
        fake_record_source(
            [
                metric_row("BM25", "Which tables does GDELT publish?", (0.9, 0.9, 0.9, 0.8)),
                metric_row("naive", "ignored", (1.0, 1.0, 1.0, 1.0)),
            ]
        ),
    )

    resp = await dashboard_async_client.get("/api/evaluation/detailed/bm25")

    assert resp.status_code == 200
    body = resp.json()
    assert body["retriever"] == "bm25"
    assert body["summary"]["totalQueries"] == 1
    assert body["summary"]["failingQueries"] == 1
    assert body["summary"]["averageMetrics"]["context_recall"] == pytest.approx(0.8)
    [result] = body["results"]
    assert result["question"] == "Which tables does GDELT publish?"
    assert result["retrievedContexts"] == [
        "Which tables does GDELT publish? ctx 1",
        "Which tables does GDELT publish? ctx 2",
    ]
    assert result["referenceContexts"] == ["Which tables does GDELT publish? ref"]
    assert result["metrics"]["average"] == pytest.approx(0.875)
    assert result["response"] == "answer to Which tables does GDELT publish?"


@pytest.mark.anyio
async def test_evaluation_detailed_rejects_unknown_retriever(
    fake_record_source: Callable[..., Any],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    source = fake_record_source([])
    _use_source(dashboard_app, source)

    resp = await dashboard_async_client.get("/api/evaluation/detailed/gpt4")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid retriever. Must be one of: naive, bm25, ensemble, cohere_rerank"
    assert source.calls == []


@pytest.mark.anyio
async def test_evaluation_detailed_returns_404_when_local_file_missing(
    tmp_path: Path,
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    _use_source(dashboard_app, LocalFileRecordSource(tmp_path))

    resp = await dashboard_async_client.get("/api/evaluation/detailed/ensemble")

    assert resp.status_code == 404
    assert "ensemble" in resp.json()["detail"]


@pytest.mark.anyio
async def test_evaluation_detailed_reads_local_files(
    tmp_path: Path,
    write_results_csv: Callable[..., Path],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    write_results_csv(
        "naive",
        [
            ["q1", "['c1', 'c2, with comma']", "['r1']", "a1", "ref1", "0.9", "0.9", "0.9", "0.9"],
            ["q2", "[]", "['']", "a2", "ref2", "", "0.7", "bad", "1"],
        ],
    )
    _use_source(dashboard_app, LocalFileRecordSource(tmp_path))

    resp = await dashboard_async_client.get("/api/evaluation/detailed/naive")

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["totalQueries"] == 2
    assert body["summary"]["failingQueries"] == 1
    assert body["results"][0]["retrievedContexts"] == ["c1", "c2, with comma"]
    assert body["results"][1]["retrievedContexts"] == []
    assert body["results"][1]["referenceContexts"] == []
    assert body["results"][1]["metrics"]["faithfulness"] == 0.0
    assert body["results"][1]["metrics"]["context_precision"] == 0.0


@pytest.mark.parametrize(
    "error",
    [
        RemoteFetchError("dataset viewer API error (502)", status_code=502, body="upstream https://internal"),
        RemoteTimeoutError("timed out"),
        ParseError("/srv/data/naive_detailed_results.csv", message="failed to parse /srv/data"),
    ],
)
@pytest.mark.anyio
async def test_evaluation_detailed_hides_io_failures(
    error: Exception,
    fake_record_source: Callable[..., Any],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    _use_source(dashboard_app, fake_record_source(error=error))

    resp = await dashboard_async_client.get("/api/evaluation/detailed/naive")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to load detailed evaluation results"}


@pytest.mark.anyio
async def test_evaluation_metrics_hides_io_failures(
    fake_record_source: Callable[..., Any],
    dashboard_app: FastAPI,
    dashboard_async_client: AsyncClient,
) -> None:
    _use_source(dashboard_app, fake_record_source(error=RemoteFetchError("boom", status_code=500, body="x")))

    resp = await dashboard_async_client.get("/api/evaluation/metrics")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to load evaluation metrics"}
