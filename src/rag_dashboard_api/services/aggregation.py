from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from rag_dashboard_api.schemas.evaluation import (
    AverageMetrics,
    EvaluationRecord,
    EvaluationSummary,
    RetrieverSummary,
)
from rag_dashboard_api.services.normalization import normalize_retriever_name

FAILING_THRESHOLD = 0.85


@dataclass
class MetricSeries:
    faithfulness: list[float] = field(default_factory=list)
    answer_relevancy: list[float] = field(default_factory=list)
    context_precision: list[float] = field(default_factory=list)
    context_recall: list[float] = field(default_factory=list)

    def append(self, record: EvaluationRecord) -> None:
        self.faithfulness.append(record.metrics.faithfulness)
        self.answer_relevancy.append(record.metrics.answer_relevancy)
        self.context_precision.append(record.metrics.context_precision)
        self.context_recall.append(record.metrics.context_recall)

    def __len__(self) -> int:
        return len(self.faithfulness)


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def is_failing(record: EvaluationRecord) -> bool:
    return any(value < FAILING_THRESHOLD for value in record.metrics.values())


def group_by_retriever(records: Iterable[EvaluationRecord]) -> dict[str, MetricSeries]:
    # dict keeps first-seen order, so output order follows the source rows
    groups: dict[str, MetricSeries] = {}
    for record in records:
        key = normalize_retriever_name(record.retriever)
        if key not in groups:
            groups[key] = MetricSeries()
        groups[key].append(record)
    return groups


def _average_metrics(series: MetricSeries) -> AverageMetrics:
    return AverageMetrics(
        faithfulness=mean(series.faithfulness),
        answer_relevancy=mean(series.answer_relevancy),
        context_precision=mean(series.context_precision),
        context_recall=mean(series.context_recall),
    )


def summarize(records: Sequence[EvaluationRecord]) -> EvaluationSummary:
    series = MetricSeries()
    for record in records:
        series.append(record)
    return EvaluationSummary(
        total_queries=len(records),
        average_metrics=_average_metrics(series),
        failing_queries=sum(1 for record in records if is_failing(record)),
    )


def summarize_groups(groups: dict[str, MetricSeries]) -> list[RetrieverSummary]:
    summaries: list[RetrieverSummary] = []
    for retriever, series in groups.items():
        averages = _average_metrics(series)
        summaries.append(
            RetrieverSummary(
                retriever=retriever,
                **averages.model_dump(),
                average=mean(averages.values()),
            )
        )
    return summaries


def best_performer(summaries: Sequence[RetrieverSummary]) -> RetrieverSummary | None:
    best: RetrieverSummary | None = None
    for item in summaries:
        if best is None or item.average > best.average:
            best = item
    return best
