from __future__ import annotations

import csv
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from rag_dashboard_api.api.query_routes import router as query_router
from rag_dashboard_api.api.routes import router as evaluation_router
from rag_dashboard_api.schemas.evaluation import RawEvaluationRow, RecordBatch

CSV_HEADER = [
    "user_input",
    "retrieved_contexts",
    "reference_contexts",
    "response",
    "reference",
    "faithfulness",
    "answer_relevancy",
    "context_precision",
    "context_recall",
]


class FakeRecordSource:
    def __init__(self, rows: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[str | None] = []

    async def fetch_rows(self, retriever: str | None = None) -> RecordBatch:
        self.calls.append(retriever)
        if self.error is not None:
            raise self.error
        return RecordBatch(
            rows=[RawEvaluationRow.model_validate(row) for row in self.rows],
            total_rows=len(self.rows),
            source="fake",
        )


def _encode_string_list(items: list[str]) -> str:
    return "[" + ", ".join(f"'{item}'" for item in items) + "]"


def _metric_row(retriever: str, question: str, scores: tuple[float, float, float, float]) -> dict[str, Any]:
    faithfulness, answer_relevancy, context_precision, context_recall = scores
    return {
        "retriever": retriever,
        "user_input": question,
        "retrieved_contexts": _encode_string_list([f"{question} ctx 1", f"{question} ctx 2"]),
        "reference_contexts": [f"{question} ref"],
        "response": f"answer to {question}",
        "reference": f"reference for {question}",
        "faithfulness": faithfulness,
        "answer_relevancy": answer_relevancy,
        "context_precision": context_precision,
        "context_recall": context_recall,
    }


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="function")
def fake_record_source() -> type[FakeRecordSource]:
    return FakeRecordSource


@pytest.fixture(scope="function")
def metric_row() -> Callable[..., dict[str, Any]]:
    return _metric_row


@pytest.fixture(scope="function")
def encode_string_list() -> Callable[[list[str]], str]:
    return _encode_string_list


@pytest.fixture(scope="function")
def write_results_csv(tmp_path: Path) -> Callable[..., Path]:
    def _write(retriever: str, rows: list[list[str]], header: list[str] | None = None) -> Path:
        path = tmp_path / f"{retriever}_detailed_results.csv"
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header or CSV_HEADER)
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture(scope="function")
def dashboard_app() -> FastAPI:
    app = FastAPI()
    app.include_router(evaluation_router)
    app.include_router(query_router)
    return app


@pytest.fixture(scope="function")
async def dashboard_async_client(dashboard_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    try:
        transport = ASGITransport(app=dashboard_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        dashboard_app.dependency_overrides.clear()
