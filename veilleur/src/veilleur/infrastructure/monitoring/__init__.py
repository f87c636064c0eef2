"""
Monitoring infrastructure for Veilleur.

Provides:
- Process log stream setup
- Lifecycle-backed health checks (liveness/readiness)
- Periodic uptime logging
"""

from veilleur.infrastructure.monitoring.health_ticker import HealthTicker
from veilleur.infrastructure.monitoring.lifecycle_health_checker import (
    LifecycleHealthChecker,
)
from veilleur.infrastructure.monitoring.logger import (
    JSONFormatter,
    LifecycleFilter,
    bind_reporter,
    get_logger,
    set_request_id,
    setup_logging,
)

__all__ = [
    "HealthTicker",
    "JSONFormatter",
    "LifecycleFilter",
    "LifecycleHealthChecker",
    "bind_reporter",
    "get_logger",
    "set_request_id",
    "setup_logging",
]
