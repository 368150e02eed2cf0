"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from typing import Optional

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Sale metrics
sales_recorded = Counter(
    'sales_recorded_total',
    'Sale recording attempts',
    ['payment_method', 'status']  # status: success, insufficient, error
)

sale_latency = Histogram(
    'sale_latency_seconds',
    'Time spent recording a sale',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

bundle_component_shortfalls = Counter(
    'bundle_component_shortfalls_total',
    'Bundle components that could not be fully decremented'
)

# Show metrics
shows_closed = Counter(
    'shows_closed_total',
    'Shows closed into a summary',
    ['status']  # success, error
)

# Inventory metrics
inventory_operations = Counter(
    'inventory_operations_total',
    'Inventory write operations',
    ['operation']  # create, create_bundle, update, adjust, delete
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get: hit/miss, set: stored
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Render every registered metric in the Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_sale_outcome(payment_method: str, status: str):
    """Record a sale attempt. Status: success, insufficient, error"""
    sales_recorded.labels(payment_method=payment_method, status=status).inc()


def record_show_closed(success: bool):
    shows_closed.labels(status="success" if success else "error").inc()


def record_inventory_operation(operation: str):
    inventory_operations.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool = False, result: Optional[str] = None):
    """Record cache operation. Lookups are hit/miss; writes pass their own result."""
    if result is None:
        result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
