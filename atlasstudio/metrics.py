"""
Prometheus metrics.

HTTP requests are labelled by route template, never by raw path, so the
number of series stays bounded no matter which URLs clients send.
"""
from prometheus_client import Counter, Histogram

# Endpoint label for requests that matched no route
UNMATCHED_ENDPOINT = "unmatched"

# ============================================
# HTTP Request Metrics
# ============================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# ============================================
# Business Metrics - Authentication
# ============================================

auth_registrations = Counter(
    'auth_registrations_total',
    'Total local registration attempts',
    ['status']
)

auth_logins = Counter(
    'auth_logins_total',
    'Total login attempts',
    ['provider', 'status']
)


# ============================================
# Metrics Helper Functions
# ============================================

def endpoint_label(scope) -> str:
    """Route template of the matched route, e.g. /oauth2/authorization/{provider}."""
    route = scope.get("route")
    path = getattr(route, "path", None)
    return path or UNMATCHED_ENDPOINT


def track_request(method: str, endpoint: str, status: int, duration_seconds: float):
    """
    Record HTTP request metrics.

    endpoint must be a route template (see endpoint_label).
    """
    http_requests_total.labels(
        method=method,
        endpoint=endpoint,
        status=status
    ).inc()

    http_request_duration.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration_seconds)


def track_registration(status: str):
    """Record a registration attempt (created, conflict, invalid)."""
    auth_registrations.labels(status=status).inc()


def track_login(provider: str, status: str):
    """Record a login attempt (success, failure)."""
    auth_logins.labels(provider=provider, status=status).inc()
