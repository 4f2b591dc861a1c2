"""Analysis orchestration: version-fallback submission and operation polling.

State machine per request::

    Submitted(primary) --404--> Submitted(fallback)
          |                            |
          +----------202---------------+--> Polling --> Succeeded | Failed

Only the single 404 fallback is retried. Transport errors from the backend
propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    stop_after_delay,
    stop_never,
)

from text_extraction.config import AppConfig
from text_extraction.errors import UpstreamError
from text_extraction.models import (
    AnalysisRequest,
    AnalysisResult,
    ApiVersion,
    OperationHandle,
    OperationState,
    PollResponse,
)
from text_extraction.services.interfaces import AnalysisBackend, MetricsClient
from text_extraction.services.metrics import NullMetrics
from text_extraction.utils.logging_utils import structured_log

_LOG = logging.getLogger("orchestrator")

PRIMARY_PATH_PREFIX = "documentintelligence"
FALLBACK_PATH_PREFIX = "formrecognizer"
START_FAILED = "Start/Analyze failed"


class AnalysisOrchestrator:
    """Drives one analysis job from submission to a terminal result."""

    def __init__(
        self,
        backend: AnalysisBackend,
        *,
        primary: ApiVersion,
        fallback: ApiVersion,
        poll_interval: float = 1.0,
        poll_timeout: float | None = None,
        metrics: MetricsClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self.primary = primary
        self.fallback = fallback
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self._metrics = metrics or NullMetrics()
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        backend: AnalysisBackend,
        cfg: AppConfig,
        *,
        metrics: MetricsClient | None = None,
    ) -> "AnalysisOrchestrator":
        return cls(
            backend,
            primary=ApiVersion(PRIMARY_PATH_PREFIX, cfg.api_version),
            fallback=ApiVersion(FALLBACK_PATH_PREFIX, cfg.fallback_api_version),
            poll_interval=cfg.poll_interval_seconds,
            poll_timeout=cfg.poll_timeout_seconds,
            metrics=metrics,
        )

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        with self._metrics.time("analysis_seconds", stage="analysis"):
            handle = await self.submit(request)
            final = await self.wait_for_completion(handle)
        if final.state is not OperationState.SUCCEEDED:
            self._metrics.increment("upstream_failure_total", stage="analysis")
            structured_log(
                _LOG,
                logging.WARNING,
                "analysis_failed",
                model=request.model.value,
                api_version=handle.api_version.api_version,
                upstream_status=final.status_code,
            )
            raise UpstreamError(
                START_FAILED, upstream_status=final.status_code, details=final.body
            )
        result = AnalysisResult.from_envelope(final.body)
        structured_log(
            _LOG,
            logging.INFO,
            "analysis_succeeded",
            model=request.model.value,
            api_version=handle.api_version.api_version,
            text_length=len(result.text),
            paragraphs=len(result.paragraphs),
            tables=len(result.tables),
        )
        return result

    async def submit(self, request: AnalysisRequest) -> OperationHandle:
        api_version = self.primary
        response = await self._backend.submit(request, api_version)
        if response.status_code == 404:
            structured_log(
                _LOG,
                logging.INFO,
                "analysis_version_fallback",
                model=request.model.value,
                api_version=self.fallback.api_version,
                upstream_status=response.status_code,
            )
            self._metrics.increment("version_fallback_total", stage="submit")
            api_version = self.fallback
            response = await self._backend.submit(request, api_version)

        if response.status_code != 202:
            self._metrics.increment("upstream_failure_total", stage="submit")
            structured_log(
                _LOG,
                logging.WARNING,
                "analysis_submit_rejected",
                model=request.model.value,
                api_version=api_version.api_version,
                upstream_status=response.status_code,
            )
            raise UpstreamError(
                START_FAILED, upstream_status=response.status_code, details=response.body
            )
        if not response.operation_location:
            raise UpstreamError(
                f"{START_FAILED}: missing Operation-Location",
                upstream_status=response.status_code,
                details=response.body,
            )
        return OperationHandle(
            operation_location=response.operation_location, api_version=api_version
        )

    def _poll_wait(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            retry_after = outcome.result().retry_after
            if retry_after is not None:
                return retry_after
        return self.poll_interval

    async def wait_for_completion(self, handle: OperationHandle) -> PollResponse:
        """Poll ``handle`` until the operation leaves the pending state."""
        stop = (
            stop_after_delay(self.poll_timeout)
            if self.poll_timeout is not None
            else stop_never
        )
        retrying = AsyncRetrying(
            retry=retry_if_result(lambda polled: polled.pending),
            wait=self._poll_wait,
            stop=stop,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            final = await retrying(self._backend.poll, handle)
        except RetryError as exc:
            last = exc.last_attempt.result()
            raise UpstreamError(
                "Analysis timed out", upstream_status=last.status_code, details=last.body
            ) from exc
        structured_log(
            _LOG,
            logging.DEBUG,
            "analysis_poll_finished",
            status=final.state.value,
            poll_attempts=retrying.statistics.get("attempt_number"),
        )
        return final


__all__ = ["AnalysisOrchestrator", "PRIMARY_PATH_PREFIX", "FALLBACK_PATH_PREFIX"]
