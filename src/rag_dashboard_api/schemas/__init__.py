from rag_dashboard_api.schemas.datasets import DatasetsInfoResponse
from rag_dashboard_api.schemas.evaluation import (
    AverageMetrics,
    DetailedResultsResponse,
    EvaluationRecord,
    EvaluationSummary,
    MetricScores,
    MetricsOverviewResponse,
    RawEvaluationRow,
    RecordBatch,
    RetrieverSummary,
)
from rag_dashboard_api.schemas.query import QueryRequest, QueryResponse

__all__ = [
    "RawEvaluationRow",
    "RecordBatch",
    "AverageMetrics",
    "MetricScores",
    "EvaluationRecord",
    "EvaluationSummary",
    "RetrieverSummary",
    "DetailedResultsResponse",
    "MetricsOverviewResponse",
    "DatasetsInfoResponse",
    "QueryRequest",
    "QueryResponse",
]
