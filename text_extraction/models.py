"""Typed values passed between the dispatcher, ingestion and analysis layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

OCTET_STREAM = "application/octet-stream"
JSON_CONTENT_TYPE = "application/json"


class AnalysisModel(str, Enum):
    """Prebuilt Document Intelligence model selected by the ``model`` query param."""

    READ = "prebuilt-read"
    LAYOUT = "prebuilt-layout"

    @classmethod
    def from_query(cls, value: str | None) -> "AnalysisModel":
        if (value or "").strip().lower() == "layout":
            return cls.LAYOUT
        return cls.READ


@dataclass(frozen=True, slots=True)
class UrlSource:
    url: str

    def to_json(self) -> dict[str, str]:
        return {"urlSource": self.url}


DocumentBody = Union[bytes, UrlSource]


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """Normalised analysis job built once per inbound request."""

    model: AnalysisModel
    content_type: str
    body: DocumentBody

    @property
    def size_bytes(self) -> int | None:
        if isinstance(self.body, bytes):
            return len(self.body)
        return None


@dataclass(frozen=True, slots=True)
class ApiVersion:
    """One Document Intelligence REST surface (path prefix + api-version)."""

    path_prefix: str
    api_version: str

    def analyze_path(self, model: AnalysisModel) -> str:
        return f"/{self.path_prefix}/documentModels/{model.value}:analyze"


@dataclass(frozen=True, slots=True)
class SubmitResponse:
    status_code: int
    operation_location: str | None = None
    body: Any = None


@dataclass(frozen=True, slots=True)
class OperationHandle:
    operation_location: str
    api_version: ApiVersion


class OperationState(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PollResponse:
    state: OperationState
    status_code: int
    body: Any = None
    retry_after: float | None = None

    @property
    def pending(self) -> bool:
        return self.state is OperationState.PENDING


@dataclass(slots=True)
class AnalysisResult:
    """Simplified view over the vendor ``analyzeResult`` envelope."""

    text: str = ""
    paragraphs: list[Any] = field(default_factory=list)
    tables: list[Any] = field(default_factory=list)

    @classmethod
    def from_envelope(cls, envelope: Any) -> "AnalysisResult":
        result = envelope.get("analyzeResult") if isinstance(envelope, dict) else None
        if not isinstance(result, dict):
            result = {}
        return cls(
            text=result.get("content") or "",
            paragraphs=result.get("paragraphs") or [],
            tables=result.get("tables") or [],
        )

    def to_payload(self) -> dict[str, Any]:
        return {"text": self.text, "paragraphs": self.paragraphs, "tables": self.tables}


__all__ = [
    "OCTET_STREAM",
    "JSON_CONTENT_TYPE",
    "AnalysisModel",
    "UrlSource",
    "DocumentBody",
    "AnalysisRequest",
    "ApiVersion",
    "SubmitResponse",
    "OperationHandle",
    "OperationState",
    "PollResponse",
    "AnalysisResult",
]
