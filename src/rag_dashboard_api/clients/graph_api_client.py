from __future__ import annotations

import asyncio
from typing import Any

import httpx
from loguru import logger

from rag_dashboard_common.observability import current_trace_headers

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


class GraphApiError(Exception):
    """Graph server answered with a non-2xx status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GraphNetworkError(Exception):
    """Graph server could not be reached."""


class GraphTimeoutError(GraphNetworkError):
    pass


class GraphApiClient:
    def __init__(
        self,
        base_url: str,
        assistant_id: str = "gdelt",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.assistant_id = assistant_id
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def create_thread(self, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {"metadata": metadata} if metadata else {}
        return await self._request("POST", "/threads", json=payload)

    async def invoke_graph(
        self,
        thread_id: str,
        question: str,
        timeout_seconds: float | None = None,
    ) -> dict[str, Any]:
        payload = {
            "assistant_id": self.assistant_id,
            "input": {"question": question},
        }
        return await self._request(
            "POST",
            f"/threads/{thread_id}/runs/wait",
            json=payload,
            timeout_seconds=timeout_seconds,
        )

    async def health_check(self) -> dict[str, Any]:
        return await self._request("GET", "/ok", timeout_seconds=HEALTH_CHECK_TIMEOUT_SECONDS)

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        timeout_seconds: float | None = None,
    ) -> dict[str, Any]:
        timeout = timeout_seconds or self.timeout_seconds
        url = f"{self.base_url}{path}"
        headers = current_trace_headers()
        logger.info("client[graph_api] request method={} url={} json={}", method, url, json)
        try:
            async with asyncio.timeout(timeout):
                async with httpx.AsyncClient(timeout=timeout, transport=self.transport, trust_env=False) as client:
                    resp = await client.request(method, url, json=json, headers=headers)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("client[graph_api] timeout method={} url={} timeout_seconds={}", method, url, timeout)
            raise GraphTimeoutError("Request timeout exceeded") from exc
        except httpx.RequestError as exc:
            logger.warning("client[graph_api] request_error method={} url={} error={}", method, url, exc)
            raise GraphNetworkError(f"Failed to reach graph server: {exc.__class__.__name__}") from exc

        logger.info(
            "client[graph_api] response method={} url={} status={} body={}",
            method,
            url,
            resp.status_code,
            resp.text[:1000],
        )
        if not resp.is_success:
            message = f"API request failed: {resp.status_code} {resp.reason_phrase}"
            details: Any = None
            try:
                details = resp.json()
            except ValueError:
                pass
            if isinstance(details, dict) and details.get("message"):
                message = str(details["message"])
            raise GraphApiError(message, status_code=resp.status_code, details=details)
        try:
            data = resp.json()
        except ValueError as exc:
            raise GraphApiError("Invalid JSON response from server", status_code=resp.status_code) from exc
        return data if isinstance(data, dict) else {}
