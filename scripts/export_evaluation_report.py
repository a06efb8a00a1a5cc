from __future__ import annotations

import argparse
from pathlib import Path

from rag_dashboard_api.config import settings
from rag_dashboard_api.services.record_source import build_record_source
from rag_dashboard_api.services.report import METRICS_REPORT_NAME, run_export
from rag_dashboard_api.services.row_cache import InMemoryRowCache
from rag_dashboard_common.observability import setup_loguru


def main() -> None:
    parser = argparse.ArgumentParser(description="Export RAG evaluation metrics and per-retriever results as JSON")
    parser.add_argument(
        "--source",
        choices=["remote", "local"],
        default=settings.record_source,
        help="Where to read evaluation rows from",
    )
    parser.add_argument(
        "--local-data-dir",
        default=settings.local_data_dir,
        help="Directory holding {retriever}_detailed_results.csv files (local source)",
    )
    parser.add_argument(
        "--report-dir",
        default="reports",
        help="Directory for exported JSON reports",
    )
    args = parser.parse_args()

    setup_loguru("rag-dashboard-export")
    config = settings.model_copy(update={"record_source": args.source, "local_data_dir": args.local_data_dir})
    record_source = build_record_source(config, cache=InMemoryRowCache(ttl_seconds=config.hf_cache_ttl_seconds))

    code = run_export(record_source, Path(args.report_dir))
    print(f"evaluation export done. metrics={Path(args.report_dir) / METRICS_REPORT_NAME}")
    raise SystemExit(code)


if __name__ == "__main__":
    main()
