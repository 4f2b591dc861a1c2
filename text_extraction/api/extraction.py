"""Text extraction route: method dispatch, ingestion selection and analysis."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from text_extraction.config import AppConfig, load_config
from text_extraction.errors import TextExtractionError
from text_extraction.ingestion import IngestionMode, ingest, select_ingestion_mode
from text_extraction.models import AnalysisModel, AnalysisRequest, AnalysisResult
from text_extraction.services.document_intelligence import AzureDocumentIntelligenceClient
from text_extraction.services.orchestrator import AnalysisOrchestrator
from text_extraction.utils.logging_utils import stage_marker

from .responses import error_response, success_response, unexpected_error

router = APIRouter()

_API_LOG = logging.getLogger("api")
ROUTE_PATH = "/api/textExtraction"
ALLOWED_METHODS = "GET, POST, OPTIONS"
_ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound vendor calls; ``None`` selects httpx's network transport."""
    return None


def _liveness_payload() -> dict[str, object]:
    return {
        "ok": True,
        "route": ROUTE_PATH,
        "expects": [
            "POST multipart/form-data",
            "POST application/json",
            "POST application/octet-stream",
        ],
    }


async def _analyze(
    request: Request,
    cfg: AppConfig,
    analysis_request: AnalysisRequest,
    mode: IngestionMode,
    transport: httpx.AsyncBaseTransport | None,
) -> AnalysisResult:
    async with httpx.AsyncClient(
        timeout=cfg.request_timeout_seconds, transport=transport
    ) as http_client:
        backend = AzureDocumentIntelligenceClient.from_config(cfg, http_client)
        orchestrator = AnalysisOrchestrator.from_config(
            backend, cfg, metrics=getattr(request.app.state, "metrics", None)
        )
        async with stage_marker(
            _API_LOG,
            stage="analysis",
            model=analysis_request.model.value,
            ingestion_mode=mode.value,
        ) as analysis_stage:
            result = await orchestrator.analyze(analysis_request)
            analysis_stage.add_completion_fields(
                text_length=len(result.text),
                paragraphs=len(result.paragraphs),
                tables=len(result.tables),
            )
    return result


@router.api_route(ROUTE_PATH, methods=_ROUTED_METHODS, include_in_schema=False)
async def text_extraction(
    request: Request,
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> Response:
    method = request.method.upper()
    if method == "OPTIONS":
        return Response(status_code=204)
    if method == "GET":
        return JSONResponse(_liveness_payload())
    if method != "POST":
        return error_response(405, "POST only", headers={"Allow": ALLOWED_METHODS})

    cfg = load_config()
    cfg.validate_required()

    model = AnalysisModel.from_query(request.query_params.get("model"))
    mode = select_ingestion_mode(request.headers.get("content-type"))
    try:
        analysis_request = await ingest(request, mode, model)
        result = await _analyze(request, cfg, analysis_request, mode, transport)
    except TextExtractionError:
        raise
    except Exception as exc:  # noqa: BLE001 - every failure becomes a JSON 500
        _API_LOG.exception(
            "text_extraction_unexpected_error",
            extra={"ingestion_mode": mode.value, "error_type": type(exc).__name__},
        )
        return unexpected_error(exc)
    return success_response(result)


__all__ = ["router", "ROUTE_PATH", "ALLOWED_METHODS", "get_http_transport"]
