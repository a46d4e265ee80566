"""
TableTalk Observability Module.

Provides in-process metrics for reasoning calls, interpretation outcomes, and errors.
"""

from tabletalk.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
