"""
Prometheus metrics configuration
"""
import os

from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram, Info,
                               generate_latest)
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY, CollectorRegistry

from app.core.config import get_settings

APP_VERSION = "0.1.0"

# Check if we're in multiprocess mode
if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    _collect_registry = CollectorRegistry()
    MultiProcessCollector(_collect_registry)
else:
    _collect_registry = REGISTRY

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# Page Protocol Metrics
# ============================================================================

inertia_renders_total = Counter(
    'inertia_renders_total',
    'Total number of rendered pages',
    ['component', 'mode']  # mode: 'json', 'html', 'ssr'
)

inertia_ssr_requests_total = Counter(
    'inertia_ssr_requests_total',
    'Server-side rendering requests',
    ['status']  # status: 'success', 'failed', 'skipped'
)

inertia_version_conflicts_total = Counter(
    'inertia_version_conflicts_total',
    'Page visits rejected because of a stale asset version'
)

# ============================================================================
# System Info
# ============================================================================

app_info = Info(
    'app_info',
    'Application information'
)

_settings = get_settings()
app_info.info({
    'app_name': _settings.app_name,
    'app_env': _settings.app_env,
    'version': APP_VERSION,
})


def get_metrics():
    """
    Get Prometheus metrics in text format

    Returns:
        bytes: Metrics in Prometheus text format
    """
    return generate_latest(_collect_registry)


def get_metrics_content_type():
    """Content type for the metrics endpoint"""
    return CONTENT_TYPE_LATEST
