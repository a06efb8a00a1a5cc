from __future__ import annotations

import math
from typing import Any

from loguru import logger

from rag_dashboard_api.schemas.evaluation import (
    METRIC_NAMES,
    DetailedResultsResponse,
    EvaluationRecord,
    MetricScores,
    MetricsOverviewResponse,
    RawEvaluationRow,
)
from rag_dashboard_api.services.aggregation import (
    best_performer,
    group_by_retriever,
    summarize,
    summarize_groups,
)
from rag_dashboard_api.services.catalog import EVALUATION_RUN_MANIFEST
from rag_dashboard_api.services.list_decoder import decode_string_list
from rag_dashboard_api.services.normalization import ensure_valid_retriever, normalize_retriever_name
from rag_dashboard_api.services.record_source import RecordSource


def coerce_metric(value: Any) -> float:
    """Absent, blank, non-numeric and NaN values all count as 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _text_items(raw: Any) -> list[str]:
    # structured sources may hand back None or numbers inside the list
    return [str(item) for item in decode_string_list(raw) if item is not None]


def build_record(row: RawEvaluationRow) -> EvaluationRecord:
    return EvaluationRecord(
        question=_text(row.user_input),
        retriever=normalize_retriever_name(_text(row.retriever)),
        metrics=MetricScores(**{name: coerce_metric(getattr(row, name)) for name in METRIC_NAMES}),
        retrieved_contexts=_text_items(row.retrieved_contexts),
        response=_text(row.response),
        reference=_text(row.reference),
        reference_contexts=_text_items(row.reference_contexts),
    )


class EvaluationAssembler:
    def __init__(self, record_source: RecordSource, manifest: dict[str, Any] | None = None) -> None:
        self.record_source = record_source
        self.manifest = manifest if manifest is not None else EVALUATION_RUN_MANIFEST

    async def build_detailed_results(self, retriever: str) -> DetailedResultsResponse:
        ensure_valid_retriever(retriever)
        batch = await self.record_source.fetch_rows(retriever)
        records = [record for record in map(build_record, batch.rows) if record.retriever == retriever]
        summary = summarize(records)
        logger.info(
            "assembler.detailed retriever={} source={} rows={} matched={} failing={}",
            retriever,
            batch.source,
            len(batch.rows),
            summary.total_queries,
            summary.failing_queries,
        )
        return DetailedResultsResponse(retriever=retriever, summary=summary, results=records)

    async def build_metrics_overview(self) -> MetricsOverviewResponse:
        batch = await self.record_source.fetch_rows(None)
        records = [build_record(row) for row in batch.rows]
        metrics = summarize_groups(group_by_retriever(records))
        best = best_performer(metrics)
        logger.info(
            "assembler.overview source={} rows={} retrievers={} best={}",
            batch.source,
            len(records),
            [item.retriever for item in metrics],
            best.retriever if best else None,
        )
        return MetricsOverviewResponse(metrics=metrics, manifest=self.manifest, best_performer=best)
