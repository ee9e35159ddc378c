"""
Prometheus metrics for the access key service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Activation key metrics
activation_keys_issued_total = Counter(
    "activation_keys_issued_total",
    "Total activation keys issued",
    ["duration_days"],
)

activation_keys_redeemed_total = Counter(
    "activation_keys_redeemed_total",
    "Total activation keys redeemed",
    ["duration_days"],
)

activation_keys_revoked_total = Counter(
    "activation_keys_revoked_total",
    "Total activation keys revoked",
)

activation_grant_failures_total = Counter(
    "activation_grant_failures_total",
    "Keys consumed whose subscription grant failed",
)

redemption_failures_total = Counter(
    "redemption_failures_total",
    "Rejected redemption attempts",
    ["reason"],
)

# Access metrics
access_decisions_total = Counter(
    "access_decisions_total",
    "AccessGate decisions",
    ["tab", "allowed"],
)

group_changes_total = Counter(
    "group_changes_total",
    "Group and membership changes",
    ["change"],
)

subscriptions_downgraded_total = Counter(
    "subscriptions_downgraded_total",
    "Principals moved back to the default group after expiry",
)

principals_registered_total = Counter(
    "principals_registered_total",
    "Principals created through self-service registration",
)

# Current state metrics
activation_keys_by_state = Gauge(
    "activation_keys_by_state",
    "Number of activation keys per state",
    ["state"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
