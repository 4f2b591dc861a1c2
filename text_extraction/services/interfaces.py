"""Shared interfaces used across the text extraction services."""

from __future__ import annotations

from typing import ContextManager, Protocol

from text_extraction.models import (
    AnalysisRequest,
    ApiVersion,
    OperationHandle,
    PollResponse,
    SubmitResponse,
)


class AnalysisBackend(Protocol):
    """Two-call view of a long-running document analysis service.

    ``submit`` starts a job against one API surface and returns the raw
    submission outcome; ``poll`` checks an accepted job once. Neither call
    retries or sleeps; the orchestrator owns that state machine.
    """

    async def submit(
        self, request: AnalysisRequest, api_version: ApiVersion
    ) -> SubmitResponse: ...

    async def poll(self, handle: OperationHandle) -> PollResponse: ...


class MetricsClient(Protocol):
    """Interface for emitting metrics to Prometheus."""

    def observe_latency(self, name: str, value: float, **labels: str) -> None: ...

    def increment(self, name: str, amount: int = 1, **labels: str) -> None: ...

    def time(self, name: str, **labels: str) -> ContextManager[None]: ...


__all__ = ["AnalysisBackend", "MetricsClient"]
