from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from loguru import logger

from rag_dashboard_api.services.assembler import EvaluationAssembler
from rag_dashboard_api.services.errors import EvaluationDataError, NotFoundError
from rag_dashboard_api.services.normalization import VALID_RETRIEVERS
from rag_dashboard_api.services.record_source import RecordSource

METRICS_REPORT_NAME = "evaluation_metrics.json"


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


async def _export_async(record_source: RecordSource, report_dir: Path) -> list[Path]:
    assembler = EvaluationAssembler(record_source=record_source)
    report_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    overview = await assembler.build_metrics_overview()
    metrics_path = report_dir / METRICS_REPORT_NAME
    _write_json(metrics_path, overview.model_dump(mode="json", by_alias=True))
    written.append(metrics_path)

    for retriever in VALID_RETRIEVERS:
        try:
            detailed = await assembler.build_detailed_results(retriever)
        except NotFoundError:
            logger.warning("report.skip retriever={} reason=not_found", retriever)
            continue
        detailed_path = report_dir / f"evaluation_detailed_{retriever}.json"
        _write_json(detailed_path, detailed.model_dump(mode="json", by_alias=True))
        written.append(detailed_path)
    return written


def run_export(record_source: RecordSource, report_dir: Path) -> int:
    try:
        written = asyncio.run(_export_async(record_source, report_dir))
    except EvaluationDataError as exc:
        logger.exception("report.failed error={}", exc.__class__.__name__)
        report_dir.mkdir(parents=True, exist_ok=True)
        _write_json(report_dir / METRICS_REPORT_NAME, {"status": "error", "error": exc.__class__.__name__})
        return 2
    logger.info("report.done files={}", [str(path) for path in written])
    return 0
