"""Prometheus metrics definitions and helpers.

Provides metric definitions for the registration service.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class RegistrationMetrics:
    """Registration service metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize registration metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.registry = registry

        # Registration outcomes
        self.registrations = Counter(
            "registrations_total",
            "Total number of registration attempts by outcome",
            ["outcome"],
            registry=registry,
        )

        # Password hashing duration
        self.password_hash_duration = Histogram(
            "password_hash_duration_seconds",
            "Time spent hashing passwords",
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
            registry=registry,
        )

        # HTTP requests
        self.http_requests = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        # HTTP request duration
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

    def record_outcome(self, outcome: str) -> None:
        """Count a finished registration attempt.

        Args:
            outcome: Outcome label (e.g. "created", "duplicate_email")
        """
        self.registrations.labels(outcome=outcome).inc()


@lru_cache()
def get_metrics() -> RegistrationMetrics:
    """Return the process-wide metrics bound to the default registry.

    Returns:
        Shared RegistrationMetrics instance
    """
    return RegistrationMetrics()


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Args:
        registry: Prometheus registry to expose

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
