"""
Prometheus metrics for the static file server.

Metrics are process-wide and only exported over HTTP when a metrics port
is configured.
"""

from prometheus_client import Counter, Gauge, Histogram, start_http_server

CONNECTIONS_TOTAL = Counter(
    "staticserve_connections_total", "Total accepted TCP connections"
)
CONNECTIONS_ACTIVE = Gauge(
    "staticserve_connections_active", "Connections currently being handled"
)
RESPONSES_TOTAL = Counter(
    "staticserve_responses_total", "Responses written by status code", ["status"]
)
READ_TIMEOUTS_TOTAL = Counter(
    "staticserve_read_timeouts_total", "Read timeouts by whether a request was in flight",
    ["partial"],
)
REQUEST_LATENCY = Histogram(
    "staticserve_request_duration_seconds", "Time spent writing each response"
)


def record_response(status: int, duration: float) -> None:
    RESPONSES_TOTAL.labels(status=str(status)).inc()
    REQUEST_LATENCY.observe(duration)


def record_timeout(partial: bool) -> None:
    READ_TIMEOUTS_TOTAL.labels(partial=str(partial).lower()).inc()


def start_metrics_server(port: int, addr: str = "0.0.0.0") -> None:
    """Expose the default registry on ``addr:port`` from a background thread."""
    start_http_server(port, addr=addr)
