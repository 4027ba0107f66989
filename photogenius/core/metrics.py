"""
Prometheus Metrics for Observability

Tracks HTTP traffic, provider calls and removal outcomes.
Exposes /api/metrics endpoint for Prometheus scraping.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# =============================================================================
# Metrics Definitions
# =============================================================================

# Provider (fal.ai) calls
provider_calls_total = Counter(
    "photogenius_provider_calls_total",
    "Total number of background removal provider calls",
    labelnames=["status", "http_status"]
)

provider_latency_seconds = Histogram(
    "photogenius_provider_latency_seconds",
    "Time spent waiting on the background removal provider",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0]
)

# Gateway outcomes
removal_requests_total = Counter(
    "photogenius_removal_requests_total",
    "Background removal requests by outcome",
    labelnames=["outcome"]
)

# HTTP
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    labelnames=["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

app_info = Info(
    "photogenius_app",
    "Application information"
)


# =============================================================================
# Helper Functions
# =============================================================================

def set_app_info(version: str, environment: str):
    """Set application info labels."""
    app_info.info({
        "version": version,
        "environment": environment,
    })


def record_provider_call(status: str, http_status: int = 200):
    """Record a provider call."""
    provider_calls_total.labels(
        status=status,
        http_status=str(http_status)
    ).inc()


def record_removal_outcome(outcome: str):
    """Record the gateway outcome (success, configuration, validation, provider)."""
    removal_requests_total.labels(outcome=outcome).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
