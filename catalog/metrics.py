"""
Prometheus metrics for the Catalog Service.

Tracks HTTP traffic and database operations.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "catalog_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "catalog_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Database metrics
catalog_db_operations_total = Counter(
    "catalog_db_operations_total",
    "Total database operations",
    ["operation", "status"],
)

catalog_db_operation_duration_seconds = Histogram(
    "catalog_db_operation_duration_seconds",
    "Database operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

# Result cap metrics
catalog_query_limit_reached_total = Counter(
    "catalog_query_limit_reached_total",
    "Queries that matched more rows than their limit",
    ["entity"],
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_db_operation(operation: str, success: bool, duration: float):
    """Track database operation metrics."""
    status = "success" if success else "failure"
    catalog_db_operations_total.labels(operation=operation, status=status).inc()
    catalog_db_operation_duration_seconds.labels(operation=operation).observe(duration)


def track_limit_reached(entity: str):
    """Track a query whose result was cut at its limit."""
    catalog_query_limit_reached_total.labels(entity=entity).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
