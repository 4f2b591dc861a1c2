from __future__ import annotations

import json

import httpx
import pytest

from text_extraction.models import (
    AnalysisModel,
    AnalysisRequest,
    ApiVersion,
    OperationHandle,
    OperationState,
    UrlSource,
)
from text_extraction.services.document_intelligence import AzureDocumentIntelligenceClient

ENDPOINT = "https://fake-di.cognitiveservices.azure.com/"
PRIMARY = ApiVersion("documentintelligence", "2024-11-30")


def _client(handler) -> tuple[AzureDocumentIntelligenceClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return (
        AzureDocumentIntelligenceClient(endpoint=ENDPOINT, api_key="secret", http_client=http_client),
        http_client,
    )


def test_constructor_requires_credentials():
    http_client = httpx.AsyncClient()
    with pytest.raises(ValueError):
        AzureDocumentIntelligenceClient(endpoint="", api_key="k", http_client=http_client)
    with pytest.raises(ValueError):
        AzureDocumentIntelligenceClient(endpoint=ENDPOINT, api_key="", http_client=http_client)


@pytest.mark.asyncio
async def test_submit_binary_builds_analyze_request():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, headers={"Operation-Location": "https://di/ops/1"})

    client, http_client = _client(handler)
    async with http_client:
        response = await client.submit(
            AnalysisRequest(
                model=AnalysisModel.LAYOUT,
                content_type="application/octet-stream",
                body=b"%PDF-1.7",
            ),
            PRIMARY,
        )
    assert response.status_code == 202
    assert response.operation_location == "https://di/ops/1"
    assert response.body is None
    request = seen[0]
    assert str(request.url) == (
        "https://fake-di.cognitiveservices.azure.com/documentintelligence/"
        "documentModels/prebuilt-layout:analyze?api-version=2024-11-30"
    )
    assert request.headers["ocp-apim-subscription-key"] == "secret"
    assert request.headers["content-type"] == "application/octet-stream"
    assert request.content == b"%PDF-1.7"


@pytest.mark.asyncio
async def test_submit_url_source_and_error_body():
    seen: list[httpx.Request] = []
    vendor_error = {"error": {"code": "InvalidRequest"}}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(400, json=vendor_error)

    client, http_client = _client(handler)
    async with http_client:
        response = await client.submit(
            AnalysisRequest(
                model=AnalysisModel.READ,
                content_type="application/json",
                body=UrlSource(url="https://example.com/a.pdf"),
            ),
            ApiVersion("formrecognizer", "2023-07-31"),
        )
    assert response.status_code == 400
    assert response.operation_location is None
    assert response.body == vendor_error
    assert seen[0].url.path == "/formrecognizer/documentModels/prebuilt-read:analyze"
    assert json.loads(seen[0].content) == {"urlSource": "https://example.com/a.pdf"}


@pytest.mark.asyncio
async def test_submit_non_json_error_body_kept_as_text():
    client, http_client = _client(lambda request: httpx.Response(503, text="Service Unavailable"))
    async with http_client:
        response = await client.submit(
            AnalysisRequest(model=AnalysisModel.READ, content_type="application/octet-stream", body=b"x"),
            PRIMARY,
        )
    assert response.body == "Service Unavailable"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "body", "expected"),
    [
        (200, {"status": "notStarted"}, OperationState.PENDING),
        (200, {"status": "running"}, OperationState.PENDING),
        (200, {"status": "succeeded", "analyzeResult": {}}, OperationState.SUCCEEDED),
        (200, {"status": "failed", "error": {"code": "x"}}, OperationState.FAILED),
        (200, {"status": "canceled"}, OperationState.FAILED),
        (404, {"error": {"code": "NotFound"}}, OperationState.FAILED),
    ],
)
async def test_poll_maps_operation_status(status_code, body, expected):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=body)

    client, http_client = _client(handler)
    async with http_client:
        polled = await client.poll(OperationHandle("https://di/ops/1?api-version=2024-11-30", PRIMARY))
    assert polled.state is expected
    assert polled.status_code == status_code
    assert polled.body == body
    assert seen[0].method == "GET"
    assert seen[0].headers["ocp-apim-subscription-key"] == "secret"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("header", "expected"),
    [("2", 2.0), ("0.5", 0.5), ("Wed, 21 Oct 2015 07:28:00 GMT", None)],
)
async def test_poll_parses_retry_after(header, expected):
    client, http_client = _client(
        lambda request: httpx.Response(200, headers={"Retry-After": header}, json={"status": "running"})
    )
    async with http_client:
        polled = await client.poll(OperationHandle("https://di/ops/1", PRIMARY))
    assert polled.retry_after == expected
