from __future__ import annotations

import asyncio
import csv
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from rag_dashboard_api.clients.hf_datasets_client import MAX_PAGE_LENGTH, HfDatasetsClient
from rag_dashboard_api.config import Settings, settings
from rag_dashboard_api.schemas.evaluation import RawEvaluationRow, RecordBatch
from rag_dashboard_api.services.errors import NotFoundError, ParseError, RowDiagnostic
from rag_dashboard_api.services.normalization import VALID_RETRIEVERS, ensure_valid_retriever
from rag_dashboard_api.services.row_cache import InMemoryRowCache, RowCache

LOCAL_FILE_SUFFIX = "_detailed_results.csv"


class RecordSource(Protocol):
    async def fetch_rows(self, retriever: str | None = None) -> RecordBatch:
        """Return raw rows; ``retriever=None`` means every retriever."""
        ...


class RemoteRecordSource:
    """Reads evaluation rows from a dataset served over the dataset viewer API.

    The dataset holds every retriever in one split, so ``fetch_rows`` always
    pages through the whole split; filtering on the retriever label is left to
    the caller.
    """

    def __init__(
        self,
        client: HfDatasetsClient,
        dataset: str,
        config: str = "default",
        split: str = "train",
        cache: RowCache | None = None,
        max_rows: int = 1000,
        page_length: int = MAX_PAGE_LENGTH,
    ) -> None:
        self.client = client
        self.dataset = dataset
        self.config = config
        self.split = split
        self.cache = cache
        self.max_rows = max_rows
        self.page_length = min(max(page_length, 1), MAX_PAGE_LENGTH)

    async def fetch_page(self, offset: int = 0, length: int = MAX_PAGE_LENGTH) -> dict[str, Any]:
        length = min(max(length, 1), MAX_PAGE_LENGTH)
        key = (self.dataset, self.config, self.split, offset, length)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.info("record_source[remote] cache_hit dataset={} offset={} length={}", self.dataset, offset, length)
                return cached
        page = await self.client.get_rows(
            dataset=self.dataset,
            config=self.config,
            split=self.split,
            offset=offset,
            length=length,
        )
        if self.cache is not None:
            await self.cache.set(key, page)
        return page

    async def fetch_rows(self, retriever: str | None = None) -> RecordBatch:
        if retriever is not None:
            ensure_valid_retriever(retriever)

        rows: list[RawEvaluationRow] = []
        total_rows = 0
        offset = 0
        while offset < self.max_rows:
            page = await self.fetch_page(offset=offset, length=min(self.page_length, self.max_rows - offset))
            page_rows = [item.get("row") or {} for item in page.get("rows", []) if isinstance(item, dict)]
            total_rows = int(page.get("num_rows_total") or 0)
            rows.extend(RawEvaluationRow.model_validate(row) for row in page_rows)
            offset += len(page_rows)
            if not page_rows or offset >= total_rows:
                break

        logger.info(
            "record_source[remote] done dataset={} fetched={} total={}",
            self.dataset,
            len(rows),
            total_rows,
        )
        return RecordBatch(rows=rows, total_rows=total_rows, source=f"hf://{self.dataset}/{self.config}/{self.split}")


class LocalFileRecordSource:
    """Reads one ``{retriever}_detailed_results.csv`` file per retriever."""

    def __init__(self, data_dir: str | Path, delimiter: str = ",") -> None:
        self.data_dir = Path(data_dir)
        self.delimiter = delimiter

    def path_for(self, retriever: str) -> Path:
        return self.data_dir / f"{retriever}{LOCAL_FILE_SUFFIX}"

    async def fetch_rows(self, retriever: str | None = None) -> RecordBatch:
        if retriever is not None:
            ensure_valid_retriever(retriever)
            rows = await asyncio.to_thread(self._read_file, retriever)
            return RecordBatch(rows=rows, total_rows=len(rows), source=str(self.path_for(retriever)))

        rows = []
        for name in VALID_RETRIEVERS:
            try:
                rows.extend(await asyncio.to_thread(self._read_file, name))
            except NotFoundError:
                logger.warning("record_source[local] skip retriever={} reason=file_missing", name)
        return RecordBatch(rows=rows, total_rows=len(rows), source=str(self.data_dir))

    def _read_file(self, retriever: str) -> list[RawEvaluationRow]:
        path = self.path_for(retriever)
        if not path.is_file():
            raise NotFoundError(f"No evaluation results found for retriever: {retriever}")

        rows: list[RawEvaluationRow] = []
        diagnostics: list[RowDiagnostic] = []
        try:
            with path.open("r", encoding="utf-8-sig", newline="") as f:
                reader = csv.reader(f, delimiter=self.delimiter)
                header = next(reader, None)
                if not header:
                    return rows
                header = [name.strip() for name in header]
                for fields in reader:
                    if not fields:
                        continue
                    if len(fields) != len(header):
                        diagnostics.append(
                            RowDiagnostic(
                                line_no=reader.line_num,
                                expected_fields=len(header),
                                actual_fields=len(fields),
                            )
                        )
                        continue
                    raw: dict[str, Any] = dict(zip(header, fields))
                    if not str(raw.get("retriever") or "").strip():
                        raw["retriever"] = retriever
                    rows.append(RawEvaluationRow.model_validate(raw))
        except (csv.Error, UnicodeDecodeError) as exc:
            logger.warning("record_source[local] unreadable path={} error={}", path, exc)
            raise ParseError(str(path), diagnostics, message=f"failed to parse {path}: {exc}") from exc

        if diagnostics:
            logger.warning(
                "record_source[local] parse_failed path={} bad_rows={} first={}",
                path,
                len(diagnostics),
                diagnostics[0],
            )
            raise ParseError(str(path), diagnostics)
        logger.info("record_source[local] done path={} rows={}", path, len(rows))
        return rows


def build_record_source(
    config: Settings,
    cache: RowCache | None = None,
) -> RecordSource:
    if config.record_source == "local":
        return LocalFileRecordSource(config.local_data_dir, delimiter=config.local_delimiter)
    return RemoteRecordSource(
        client=HfDatasetsClient(config.hf_base_url, timeout_seconds=config.hf_timeout_seconds),
        dataset=config.hf_metrics_dataset,
        config=config.hf_config,
        split=config.hf_split,
        cache=cache,
        max_rows=config.hf_max_rows,
    )


_row_cache_singleton = InMemoryRowCache(ttl_seconds=settings.hf_cache_ttl_seconds)


def get_record_source() -> RecordSource:
    return build_record_source(settings, cache=_row_cache_singleton)
