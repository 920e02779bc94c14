"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    RegistrationMetrics,
    get_metrics,
    get_metrics_handler,
)

__all__ = [
    "RegistrationMetrics",
    "get_metrics",
    "get_metrics_handler",
]
