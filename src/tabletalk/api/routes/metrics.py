"""
TableTalk Metrics Endpoint.

Exposes observability metrics for monitoring and debugging.
"""

from fastapi import APIRouter

from tabletalk.observability import get_metrics_store

router = APIRouter(prefix="/api/v1", tags=["metrics"])


@router.get("/metrics")
def get_metrics() -> dict:
    """
    Get current metrics summary.

    Returns, per model intent (analyze-data, generate-questions, query-data):
    - Reasoning call latencies (p50, p90, p99, mean, max)
    - Error counts by code
    - How often the response had to fall back to defaults

    Example response:
    ```json
    {
      "uptime_seconds": 3600.5,
      "collected_at": "2026-01-10T19:00:00Z",
      "intents": {
        "query-data": {
          "call_count": 42,
          "p50_ms": 850.2,
          "p99_ms": 3100.5,
          "fallback_rate": 0.05,
          "errors": {"TRANSPORT_ERROR": 1}
        }
      },
      "global_errors": {"UNAUTHENTICATED": 3}
    }
    ```
    """
    return get_metrics_store().get_summary()
