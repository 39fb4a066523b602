"""
Prometheus metrics for asnetkit

Counters and histograms for request monitoring. The host application is
responsible for exposing the prometheus_client registry.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("asnetkit.metrics")

# Completed requests by method and outcome ("success", "server_error", ...)
REQUEST_COUNT = Counter(
    "asnetkit_requests_total",
    "Total number of completed requests",
    ["method", "outcome"],
)

RETRY_COUNT = Counter(
    "asnetkit_retries_total",
    "Total number of retries approved after transport failures",
    ["method"],
)

REQUEST_LATENCY = Histogram(
    "asnetkit_request_latency_seconds",
    "Request latency in seconds, retries included",
    ["method"],
)


def outcome_label(error: object) -> str:
    """Metric label for a completed request: "success" or the error kind."""
    if error is None:
        return "success"
    name = type(error).__name__
    return {
        "InvalidURLError": "invalid_url",
        "ParameterEncodingError": "encoding_error",
        "RequestAdaptationError": "adaptation_failed",
        "UnderlyingError": "underlying",
        "ServerError": "server_error",
        "RequestCancelledError": "cancelled",
        "FileMoveError": "file_move_failed",
    }.get(name, "error")


def record_request(method: str, outcome: str, latency: float) -> None:
    """
    Record metrics for a completed request.

    Args:
        method: HTTP method
        outcome: Outcome label from ``outcome_label``
        latency: Seconds from execution start to completion
    """
    try:
        REQUEST_COUNT.labels(method=method, outcome=outcome).inc()
        REQUEST_LATENCY.labels(method=method).observe(latency)
    except Exception as e:
        # Metrics failures should not break requests
        logger.debug("Failed to record metrics: %s", e)


def record_retry(method: str) -> None:
    try:
        RETRY_COUNT.labels(method=method).inc()
    except Exception as e:
        logger.debug("Failed to record metrics: %s", e)
