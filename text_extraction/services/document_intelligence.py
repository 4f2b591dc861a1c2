"""Azure AI Document Intelligence REST backend.

Implements `AnalysisBackend` over plain HTTP so both the current
(``documentintelligence``) and the legacy (``formrecognizer``) API surfaces can
be addressed by path. Credentials and the HTTP client are injected; this module
never reads the environment.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from text_extraction.config import AppConfig
from text_extraction.models import (
    AnalysisRequest,
    ApiVersion,
    OperationHandle,
    OperationState,
    PollResponse,
    SubmitResponse,
    UrlSource,
)

_LOG = logging.getLogger("document_intelligence")

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
_SUCCEEDED_STATUSES = {"succeeded"}
_FAILED_STATUSES = {"failed", "canceled", "cancelled"}


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _parse_retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(float(raw), 0.0)
    except ValueError:
        # HTTP-date form is not used by the service; fall back to the configured interval.
        return None


class AzureDocumentIntelligenceClient:
    """Thin async REST client for Document Intelligence analyze operations."""

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        http_client: httpx.AsyncClient,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint required")
        if not api_key:
            raise ValueError("api_key required")
        self.endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._http = http_client

    @classmethod
    def from_config(
        cls, cfg: AppConfig, http_client: httpx.AsyncClient
    ) -> "AzureDocumentIntelligenceClient":
        return cls(endpoint=cfg.endpoint, api_key=cfg.azure_di_key.strip(), http_client=http_client)

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {SUBSCRIPTION_KEY_HEADER: self._api_key}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def submit(
        self, request: AnalysisRequest, api_version: ApiVersion
    ) -> SubmitResponse:
        if isinstance(request.body, UrlSource):
            content = json.dumps(request.body.to_json()).encode("utf-8")
        else:
            content = request.body
        url = f"{self.endpoint}{api_version.analyze_path(request.model)}"
        response = await self._http.post(
            url,
            params={"api-version": api_version.api_version},
            headers=self._headers(request.content_type),
            content=content,
        )
        _LOG.debug(
            "analyze_submitted",
            extra={
                "api_version": api_version.api_version,
                "upstream_status": response.status_code,
            },
        )
        return SubmitResponse(
            status_code=response.status_code,
            operation_location=response.headers.get("operation-location"),
            body=_decode_body(response),
        )

    async def poll(self, handle: OperationHandle) -> PollResponse:
        response = await self._http.get(
            handle.operation_location, headers=self._headers()
        )
        body = _decode_body(response)
        retry_after = _parse_retry_after(response)
        if response.status_code != 200:
            return PollResponse(
                state=OperationState.FAILED,
                status_code=response.status_code,
                body=body,
                retry_after=retry_after,
            )
        status = str(body.get("status", "")).lower() if isinstance(body, dict) else ""
        if status in _SUCCEEDED_STATUSES:
            state = OperationState.SUCCEEDED
        elif status in _FAILED_STATUSES:
            state = OperationState.FAILED
        else:
            state = OperationState.PENDING
        return PollResponse(
            state=state,
            status_code=response.status_code,
            body=body,
            retry_after=retry_after,
        )


__all__ = ["AzureDocumentIntelligenceClient", "SUBSCRIPTION_KEY_HEADER"]
