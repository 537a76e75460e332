"""
Prometheus metrics definitions for the Snyk issues client.

Defines Counter and Histogram metrics for monitoring REST API traffic
made while enumerating organizations, projects and issues. The host process
(typically an exporter) decides whether and how to expose the registry.

Naming conventions: snake_case, snyk_client_ prefix.
"""

from prometheus_client import Counter, Histogram

__all__ = [
    "enumeration_duration_seconds",
    "items_fetched_total",
    "pages_fetched_total",
    "request_duration_seconds",
    "requests_total",
]

# ==============================================================================
# COUNTERS - Monotonically increasing values
# ==============================================================================

requests_total = Counter(
    "snyk_client_requests_total",
    "Total Snyk REST API requests",
    ["resource", "status"],
    # resource: orgs, projects, issues
    # status: ok, failed (non-200), error (network)
)

pages_fetched_total = Counter(
    "snyk_client_pages_fetched_total",
    "Pages decoded during paginated enumeration",
    ["resource"],
)

items_fetched_total = Counter(
    "snyk_client_items_fetched_total",
    "Items returned by completed enumerations",
    ["resource"],
)

# ==============================================================================
# HISTOGRAMS - Latency distributions
# ==============================================================================

request_duration_seconds = Histogram(
    "snyk_client_request_duration_seconds",
    "Time spent on a single Snyk REST API request",
    ["resource"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

enumeration_duration_seconds = Histogram(
    "snyk_client_enumeration_duration_seconds",
    "Time spent listing every page of one resource",
    ["resource", "status"],
    # status: success, failed
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)
