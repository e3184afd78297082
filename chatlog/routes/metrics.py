"""Prometheus metrics for the webhook and dashboard API."""
from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter()

WEBHOOK_RESULTS = ("created", "validation_error", "storage_error")

http_requests_total = Counter(
    "http_requests_total",
    "HTTP responses by route path and status code",
    ["path", "status"],
)

webhook_requests_total = Counter(
    "webhook_requests_total",
    "Chat messages posted to the webhook, by outcome",
    ["result"],
)

stats_update_failures_total = Counter(
    "stats_update_failures_total",
    "Messages stored without a matching user_stats update",
)

request_latency_ms = Histogram(
    "request_latency_ms",
    "Request latency in milliseconds",
    buckets=[5, 25, 100, 500, 1000, 5000, float("inf")],
)

# Pre-create outcome series so dashboards see zeros before the first message
for _result in WEBHOOK_RESULTS:
    webhook_requests_total.labels(result=_result)


def observe_request(path: str, status: int, latency_ms: int) -> None:
    http_requests_total.labels(path=path, status=status).inc()
    request_latency_ms.observe(latency_ms)


def count_webhook_result(result: str) -> None:
    webhook_requests_total.labels(result=result).inc()


def count_stats_update_failure() -> None:
    stats_update_failures_total.inc()


@router.get("/metrics")
async def metrics():
    """Prometheus text exposition of every registered metric."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
