from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

METRIC_NAMES: tuple[str, ...] = ("faithfulness", "answer_relevancy", "context_precision", "context_recall")


class RawEvaluationRow(BaseModel):
    """数据源原始行，所有字段可缺省，类型宽松。"""

    model_config = ConfigDict(extra="ignore")

    retriever: Any = Field(default=None, description="检索策略原始名称")
    user_input: Any = Field(default=None, description="问题文本")
    retrieved_contexts: Any = Field(default=None, description="检索上下文（列表或列表字符串）")
    reference_contexts: Any = Field(default=None, description="参考上下文（列表或列表字符串）")
    response: Any = Field(default=None, description="生成回答")
    reference: Any = Field(default=None, description="参考答案")
    synthesizer_name: Any = Field(default=None, description="测试集生成器名称")
    faithfulness: Any = Field(default=None)
    answer_relevancy: Any = Field(default=None)
    context_precision: Any = Field(default=None)
    context_recall: Any = Field(default=None)


class RecordBatch(BaseModel):
    rows: list[RawEvaluationRow] = Field(default_factory=list, description="原始评测行")
    total_rows: int = Field(default=0, description="数据源报告的总行数")
    source: str = Field(default="", description="数据源标识")


class AverageMetrics(BaseModel):
    faithfulness: float = Field(default=0.0, description="忠实度")
    answer_relevancy: float = Field(default=0.0, description="回答相关性")
    context_precision: float = Field(default=0.0, description="上下文精确率")
    context_recall: float = Field(default=0.0, description="上下文召回率")

    def values(self) -> list[float]:
        return [self.faithfulness, self.answer_relevancy, self.context_precision, self.context_recall]


class MetricScores(AverageMetrics):
    """单条评测记录的四项指标，average 在读取时计算。"""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average(self) -> float:
        values = self.values()
        return sum(values) / len(values)


class EvaluationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(default="", description="问题文本")
    retriever: str = Field(default="", description="规范化后的检索策略ID")
    metrics: MetricScores = Field(default_factory=MetricScores, description="评测指标")
    retrieved_contexts: list[str] = Field(default_factory=list, alias="retrievedContexts", description="检索上下文")
    response: str = Field(default="", description="生成回答")
    reference: str = Field(default="", description="参考答案")
    reference_contexts: list[str] = Field(default_factory=list, alias="referenceContexts", description="参考上下文")


class EvaluationSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_queries: int = Field(alias="totalQueries", description="该检索策略的记录数")
    average_metrics: AverageMetrics = Field(alias="averageMetrics", description="四项指标均值")
    failing_queries: int = Field(alias="failingQueries", description="任一指标低于阈值的记录数")


class RetrieverSummary(AverageMetrics):
    retriever: str = Field(description="规范化后的检索策略ID")
    average: float = Field(default=0.0, description="四项均值的均值")


class DetailedResultsResponse(BaseModel):
    retriever: str = Field(description="检索策略ID")
    summary: EvaluationSummary = Field(description="汇总统计")
    results: list[EvaluationRecord] = Field(description="逐条评测结果")


class MetricsOverviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    metrics: list[RetrieverSummary] = Field(description="各检索策略汇总指标")
    manifest: dict[str, Any] = Field(description="评测运行元数据")
    best_performer: RetrieverSummary | None = Field(
        default=None, alias="bestPerformer", description="平均分最高的检索策略"
    )
