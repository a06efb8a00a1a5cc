from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from rag_dashboard_api.config import settings
from rag_dashboard_api.schemas.datasets import DatasetsInfoResponse
from rag_dashboard_api.schemas.evaluation import DetailedResultsResponse, MetricsOverviewResponse
from rag_dashboard_api.services.assembler import EvaluationAssembler
from rag_dashboard_api.services.catalog import DATASETS, load_provenance_manifest
from rag_dashboard_api.services.errors import (
    EvaluationDataError,
    NotFoundError,
    RemoteFetchError,
    RetrieverValidationError,
)
from rag_dashboard_api.services.record_source import RecordSource, get_record_source

router = APIRouter(prefix="/api", tags=["evaluation"])


def get_evaluation_assembler(
    record_source: RecordSource = Depends(get_record_source),
) -> EvaluationAssembler:
    return EvaluationAssembler(record_source=record_source)


@router.get(
    "/evaluation/metrics",
    response_model=MetricsOverviewResponse,
    summary="检索策略汇总指标",
    description="按规范化后的检索策略分组，计算 RAGAS 四项指标均值，并附带评测运行元数据。",
)
async def get_evaluation_metrics(
    assembler: EvaluationAssembler = Depends(get_evaluation_assembler),
) -> MetricsOverviewResponse:
    try:
        return await assembler.build_metrics_overview()
    except EvaluationDataError as exc:
        logger.exception("evaluation_metrics.failed error={}", exc.__class__.__name__)
        raise HTTPException(status_code=500, detail="Failed to load evaluation metrics") from exc


@router.get(
    "/evaluation/detailed/{retriever}",
    response_model=DetailedResultsResponse,
    summary="单个检索策略的逐条评测结果",
    description="返回指定检索策略的逐条记录、四项指标均值以及未达阈值（0.85）的记录数。",
)
async def get_evaluation_detailed(
    retriever: str,
    assembler: EvaluationAssembler = Depends(get_evaluation_assembler),
) -> DetailedResultsResponse:
    try:
        return await assembler.build_detailed_results(retriever)
    except RetrieverValidationError as exc:
        logger.warning("evaluation_detailed.invalid_retriever retriever={}", retriever)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        logger.warning("evaluation_detailed.not_found retriever={}", retriever)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RemoteFetchError as exc:
        logger.exception(
            "evaluation_detailed.remote_failed retriever={} status={} body={}",
            retriever,
            exc.status_code,
            exc.body[:500],
        )
        raise HTTPException(status_code=500, detail="Failed to load detailed evaluation results") from exc
    except EvaluationDataError as exc:
        logger.exception("evaluation_detailed.failed retriever={} error={}", retriever, exc)
        raise HTTPException(status_code=500, detail="Failed to load detailed evaluation results") from exc


@router.get(
    "/datasets/info",
    response_model=DatasetsInfoResponse,
    summary="数据集目录",
    description="返回评测流程使用的公开数据集静态目录。",
)
async def get_datasets_info() -> DatasetsInfoResponse:
    return DatasetsInfoResponse(datasets=DATASETS)


@router.get(
    "/datasets/manifest",
    summary="数据生成清单",
    description="返回数据生成运行的环境、参数与内容指纹；配置文件不存在时返回内置清单。",
)
async def get_datasets_manifest() -> dict[str, Any]:
    try:
        return load_provenance_manifest(settings.manifest_path)
    except EvaluationDataError as exc:
        logger.exception("datasets_manifest.failed error={}", exc)
        raise HTTPException(status_code=500, detail="Failed to load dataset manifest") from exc
