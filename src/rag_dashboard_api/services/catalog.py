from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from rag_dashboard_api.services.errors import ParseError
from rag_dashboard_api.services.normalization import VALID_RETRIEVERS

_HF_FORMATS = ["Parquet", "JSONL", "HF Datasets"]

DATASETS: list[dict[str, Any]] = [
    {
        "id": "gdelt-rag-sources-v2",
        "name": "GDELT RAG Sources v2",
        "description": (
            "38 GDELT documentation pages including GKG 2.1 architecture docs, knowledge graph "
            "construction guides, and Baltimore Bridge Collapse case study"
        ),
        "url": "https://huggingface.co/datasets/dwb2023/gdelt-rag-sources-v2",
        "records": 38,
        "format": _HF_FORMATS,
        "license": "Apache 2.0",
        "version": "v2",
        "schema": {
            "page_content": "1.5k-5.2k chars",
            "metadata": "author, title, page, creation_date, etc.",
        },
        "use_cases": [
            "Populate vector stores",
            "Document chunking experiments",
            "GDELT research",
        ],
    },
    {
        "id": "gdelt-rag-golden-testset-v2",
        "name": "GDELT RAG Golden Testset v2",
        "description": (
            "12 synthetically generated QA pairs covering GDELT data formats, Translingual features, "
            "date extraction, proximity context, and emotions"
        ),
        "url": "https://huggingface.co/datasets/dwb2023/gdelt-rag-golden-testset-v2",
        "records": 12,
        "format": _HF_FORMATS,
        "license": "Apache 2.0",
        "version": "v2",
        "schema": {
            "user_input": "question",
            "reference_contexts": "ground truth passages",
            "reference": "answer",
            "synthesizer_name": "ragas generator",
        },
        "use_cases": [
            "Benchmark RAG systems using RAGAS metrics",
            "Validate retrieval performance",
        ],
    },
    {
        "id": "gdelt-rag-evaluation-inputs",
        "name": "GDELT RAG Evaluation Inputs",
        "description": "60 evaluation records from 5 retrieval strategies (baseline, naive, BM25, ensemble, cohere_rerank)",
        "url": "https://huggingface.co/datasets/dwb2023/gdelt-rag-evaluation-inputs",
        "records": 60,
        "format": _HF_FORMATS,
        "license": "Apache 2.0",
        "version": "v1",
        "schema": {
            "retriever": "strategy name",
            "user_input": "question",
            "retrieved_contexts": "contexts",
            "response": "generated answer",
            "reference": "ground truth",
        },
        "use_cases": [
            "Benchmark new retrievers",
            "Analyze retrieval quality",
            "Reproduce certification results",
            "Debug RAG pipelines",
        ],
    },
    {
        "id": "gdelt-rag-evaluation-metrics",
        "name": "GDELT RAG Evaluation Metrics",
        "description": "60 evaluation records with detailed RAGAS scores (faithfulness, relevancy, precision, recall)",
        "url": "https://huggingface.co/datasets/dwb2023/gdelt-rag-evaluation-metrics",
        "records": 60,
        "format": _HF_FORMATS,
        "license": "Apache 2.0",
        "version": "v1",
        "schema": {
            "all_input_fields": "...",
            "faithfulness": "float64 (0-1)",
            "answer_relevancy": "float64 (0-1)",
            "context_precision": "float64 (0-1)",
            "context_recall": "float64 (0-1)",
        },
        "key_findings": {
            "winner": "Cohere Rerank (95.08% avg)",
            "baseline": "93.92% avg",
            "best_precision": "Cohere (+4.55% vs baseline)",
        },
        "use_cases": [
            "Performance analysis",
            "Error analysis",
            "Train retrieval models with RAGAS scores as quality labels",
            "RAG evaluation research",
        ],
    },
]

# Returned next to the per-retriever metrics.
EVALUATION_RUN_MANIFEST: dict[str, Any] = {
    "generated_at": "2025-01-13T00:00:00Z",
    "llm": {"model": "gpt-4o-mini", "temperature": 0},
    "embeddings": {"model": "text-embedding-3-small", "dimensions": 1536},
    "retrievers": list(VALID_RETRIEVERS),
    "evaluation": {"golden_testset_size": 48, "source_dataset_size": 24},
    "data_provenance": {
        "sources_sha256": "c39263dea5cf001f18b36e7c7c7273f4f4f4134240e288fb3256dc72b193a5fa",
        "golden_testset_sha256": "e410c99a1c9e37a2650ced20e11342a2324cc55132b2e1b53e5757c7e4fbe176",
    },
}

DEFAULT_PROVENANCE_MANIFEST: dict[str, Any] = {
    "id": "ragas_pipeline_f4df656e-997e-4830-ab75-dc15fa57621c",
    "generated_at": "2025-11-01T23:59:54.594112Z",
    "run": {"random_seed": 42},
    "env": {
        "python": "3.11.13",
        "os": "Linux",
        "langchain": "0.3.27",
        "ragas": "0.2.10",
        "datasets": "4.3.0",
        "pyarrow": "21.0.0",
        "huggingface_hub": "1.0.1",
    },
    "params": {
        "OPENAI_MODEL": "gpt-4.1-mini",
        "OPENAI_EMBED_MODEL": "text-embedding-3-small",
        "TESTSET_SIZE": 10,
        "MAX_DOCS": None,
    },
    "paths": {
        "sources": {
            "jsonl": "data/interim/sources.docs.jsonl",
            "parquet": "data/interim/sources.docs.parquet",
            "hfds": "data/interim/sources.hfds",
        },
        "golden_testset": {
            "jsonl": "data/interim/golden_testset.jsonl",
            "parquet": "data/interim/golden_testset.parquet",
            "hfds": "data/interim/golden_testset.hfds",
        },
    },
    "fingerprints": {
        "sources": {
            "jsonl_sha256": "c39263dea5cf001f18b36e7c7c7273f4f4f4134240e288fb3256dc72b193a5fa",
            "parquet_sha256": "5fb8c42f4ecf77181d64d4afda2c912ce202502c20e8b4e04c5c65f608e8a955",
        },
        "golden_testset": {
            "jsonl_sha256": "e410c99a1c9e37a2650ced20e11342a2324cc55132b2e1b53e5757c7e4fbe176",
            "parquet_sha256": "baf2b39f6cfcc69ff9b10c28cc54cefc876fc000d2a83c3016684715d6f448d4",
        },
    },
}


def load_provenance_manifest(path: str | Path | None) -> dict[str, Any]:
    if path is None or not Path(path).is_file():
        return DEFAULT_PROVENANCE_MANIFEST
    manifest_path = Path(path)
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning("catalog.manifest_invalid path={} error={}", manifest_path, exc)
        raise ParseError(str(manifest_path), message=f"invalid manifest JSON in {manifest_path}: {exc}") from exc
    except (UnicodeDecodeError, OSError) as exc:
        logger.warning("catalog.manifest_unreadable path={} error={}", manifest_path, exc)
        raise ParseError(str(manifest_path), message=f"unreadable manifest {manifest_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(str(manifest_path), message=f"manifest {manifest_path} is not a JSON object")
    logger.info("catalog.manifest_loaded path={}", manifest_path)
    return data
