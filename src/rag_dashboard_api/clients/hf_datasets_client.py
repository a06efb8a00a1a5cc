from __future__ import annotations

import asyncio
from typing import Any

import httpx
from loguru import logger

from rag_dashboard_api.services.errors import RemoteFetchError, RemoteTimeoutError
from rag_dashboard_common.observability import current_trace_headers

MAX_PAGE_LENGTH = 100


class HfDatasetsClient:
    """Client for the dataset viewer ``/rows`` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def get_rows(
        self,
        dataset: str,
        config: str = "default",
        split: str = "train",
        offset: int = 0,
        length: int = MAX_PAGE_LENGTH,
    ) -> dict[str, Any]:
        params = {
            "dataset": dataset,
            "config": config,
            "split": split,
            "offset": str(max(offset, 0)),
            "length": str(min(max(length, 1), MAX_PAGE_LENGTH)),
        }
        url = f"{self.base_url}/rows"
        headers = current_trace_headers()
        logger.info("client[hf_datasets] request method=GET url={} params={}", url, params)
        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with httpx.AsyncClient(
                    timeout=self.timeout_seconds,
                    transport=self.transport,
                    trust_env=False,
                ) as client:
                    resp = await client.get(url, params=params, headers=headers)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("client[hf_datasets] timeout url={} timeout_seconds={}", url, self.timeout_seconds)
            raise RemoteTimeoutError(f"dataset viewer request timed out after {self.timeout_seconds}s") from exc
        except httpx.RequestError as exc:
            logger.warning("client[hf_datasets] request_error url={} error={}", url, exc.__class__.__name__)
            raise RemoteFetchError(f"dataset viewer request failed: {exc.__class__.__name__}") from exc

        logger.info(
            "client[hf_datasets] response method=GET url={} status={} bytes={}",
            url,
            resp.status_code,
            len(resp.content),
        )
        if not resp.is_success:
            raise RemoteFetchError(
                f"dataset viewer API error ({resp.status_code})",
                status_code=resp.status_code,
                body=resp.text,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteFetchError(
                "dataset viewer returned a non-JSON body",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc
        if not isinstance(data, dict):
            raise RemoteFetchError(
                "dataset viewer returned an unexpected payload",
                status_code=resp.status_code,
                body=resp.text,
            )
        return data
