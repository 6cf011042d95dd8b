from __future__ import annotations

import time

import psutil

from webproof.core.errors import ErrorKind, WebProofError
from webproof.models.proof.schemas import (
    PerformanceMetrics,
    WebProofResponse,
    WebProofResult,
)

UNKNOWN_ERROR = "Unknown error occurred"


def now_ms() -> float:
    """Monotonic timestamp in milliseconds."""
    return time.perf_counter() * 1000


def create_performance_metrics(
    start_time: float, end_time: float | None = None
) -> PerformanceMetrics:
    """Build metrics for an invocation that started at *start_time*.

    ``memory_usage`` is the resident set size of this process, in bytes.
    """
    end = end_time if end_time is not None else now_ms()
    memory = psutil.Process().memory_info().rss
    return PerformanceMetrics(
        start_time=start_time,
        end_time=end,
        duration=end - start_time,
        memory_usage=memory,
    )


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, WebProofError):
        return exc.kind
    return ErrorKind.CAPABILITY_INVOCATION_FAILURE


def normalize_response(
    response: WebProofResponse, metrics: PerformanceMetrics
) -> WebProofResult:
    """Map a raw capability response onto the public result shape."""
    if response.success and response.data:
        return WebProofResult(success=True, proof=response.data, metrics=metrics)
    if response.success:
        return WebProofResult(
            success=False,
            error="Native binding reported success without proof data",
            error_kind=ErrorKind.MALFORMED_RESPONSE,
            metrics=metrics,
        )
    return WebProofResult(
        success=False,
        error=response.error or UNKNOWN_ERROR,
        error_kind=ErrorKind.CAPABILITY_INVOCATION_FAILURE,
        metrics=metrics,
    )


def normalize_error(exc: BaseException, metrics: PerformanceMetrics) -> WebProofResult:
    return WebProofResult(
        success=False,
        error=str(exc) or UNKNOWN_ERROR,
        error_kind=classify_error(exc),
        metrics=metrics,
    )
