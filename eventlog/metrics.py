"""
Prometheus metrics for the event logging service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the event logging service.
    """

    def __init__(self, service_name: str = "eventlog", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics
        self.events_logged_total = Counter(
            "eventlog_events_logged_total",
            "Total events written to the store",
            ["event_type"],
            registry=self.registry,
        )

        self.events_rejected_total = Counter(
            "eventlog_events_rejected_total",
            "Total event submissions rejected as invalid",
            registry=self.registry,
        )

    def track_active(self):
        """Context manager counting a request as in flight."""
        return self.http_requests_active.labels(service=self.service_name).track_inprogress()

    def record_request(self, method: str, route: str, status: int, duration: float):
        """Record a finished HTTP request under its route template."""
        self.http_requests_total.labels(
            service=self.service_name, method=method, path=route, status=status
        ).inc()
        self.http_request_duration.labels(
            service=self.service_name, method=method, path=route
        ).observe(duration)

    def record_event_logged(self, event_type: str):
        """Record a successful event write."""
        self.events_logged_total.labels(event_type=event_type).inc()

    def record_event_rejected(self):
        """Record a submission that failed validation."""
        self.events_rejected_total.inc()
