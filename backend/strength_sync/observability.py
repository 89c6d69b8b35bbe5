"""Lightweight observability helpers (request logging + metrics)."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict
from contextvars import ContextVar
from threading import Lock
from typing import Iterable, Protocol

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from strength_sync.core.config import get_settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger(__name__)

DEFAULT_BUCKETS_MS = [50, 100, 250, 500, 1000, 2500, 5000, 10000]


def get_request_id() -> str | None:
    """Return the current request id if set by middleware."""
    return request_id_ctx.get()


class MetricsBackend(Protocol):
    """Metrics backend interface."""

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        ...

    def observe_external_api(
        self,
        provider: str,
        operation: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        ...

    def observe_file_download(self, size_bytes: int, success: bool) -> None:
        ...

    def observe_import(
        self,
        outcome: str,
        duration_ms: float,
        exercises_found: int = 0,
        exercises_created: int = 0,
    ) -> None:
        ...

    def render_prometheus(self) -> str:
        ...


class MetricsCollector:
    """In-process metrics collector with Prometheus text output."""

    def __init__(self, buckets_ms: Iterable[int] | None = None) -> None:
        self._lock = Lock()
        self._buckets_ms = list(buckets_ms or DEFAULT_BUCKETS_MS)
        self._request_counts: dict[tuple[str, str, str], int] = defaultdict(int)
        self._external_counts: dict[tuple[str, str, str], int] = defaultdict(int)
        self._download_counts: dict[str, int] = defaultdict(int)
        self._download_bytes: dict[str, int] = defaultdict(int)
        self._import_counts: dict[str, int] = defaultdict(int)
        self._import_exercises: dict[str, int] = defaultdict(int)
        # (metric, labels) -> bucket -> count, plus running sum/count
        self._histograms: dict[tuple[str, tuple[tuple[str, str], ...]], dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._hist_sum: dict[tuple[str, tuple[tuple[str, str], ...]], float] = defaultdict(float)
        self._hist_count: dict[tuple[str, tuple[tuple[str, str], ...]], int] = defaultdict(int)

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        """Record a single request observation."""
        with self._lock:
            self._request_counts[(method, path, str(status_code))] += 1
            self._observe_histogram(
                "http_request_duration_ms",
                (("method", method), ("path", path)),
                duration_ms,
            )

    def observe_external_api(
        self,
        provider: str,
        operation: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        """Record an external API call observation."""
        with self._lock:
            self._external_counts[(provider, operation, str(status_code))] += 1
            self._observe_histogram(
                "external_api_duration_ms",
                (("provider", provider), ("operation", operation)),
                duration_ms,
            )

    def observe_file_download(self, size_bytes: int, success: bool) -> None:
        """Record an activity file download."""
        status = "success" if success else "error"
        with self._lock:
            self._download_counts[status] += 1
            if success and size_bytes > 0:
                self._download_bytes[status] += size_bytes

    def observe_import(
        self,
        outcome: str,
        duration_ms: float,
        exercises_found: int = 0,
        exercises_created: int = 0,
    ) -> None:
        """Record one strength import run."""
        with self._lock:
            self._import_counts[outcome] += 1
            self._import_exercises["found"] += exercises_found
            self._import_exercises["created"] += exercises_created
            self._observe_histogram(
                "strength_import_duration_ms",
                (("outcome", outcome),),
                duration_ms,
            )

    def render_prometheus(self) -> str:
        """Render metrics in Prometheus text format."""
        lines: list[str] = []
        with self._lock:
            lines.extend(_header("http_requests_total", "Total HTTP requests", "counter"))
            for (method, path, status), count in sorted(self._request_counts.items()):
                lines.append(
                    f'http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}'
                )

            lines.extend(
                _header("external_api_requests_total", "External API requests", "counter")
            )
            for (provider, operation, status), count in sorted(self._external_counts.items()):
                lines.append(
                    "external_api_requests_total"
                    f'{{provider="{provider}",operation="{operation}",status="{status}"}} {count}'
                )

            lines.extend(
                _header("activity_file_downloads_total", "Activity file download attempts", "counter")
            )
            for status, count in sorted(self._download_counts.items()):
                lines.append(f'activity_file_downloads_total{{status="{status}"}} {count}')

            lines.extend(
                _header("activity_file_download_bytes_total", "Activity file bytes downloaded", "counter")
            )
            for status, total in sorted(self._download_bytes.items()):
                lines.append(f'activity_file_download_bytes_total{{status="{status}"}} {total}')

            lines.extend(_header("strength_imports_total", "Strength import runs", "counter"))
            for outcome, count in sorted(self._import_counts.items()):
                lines.append(f'strength_imports_total{{outcome="{outcome}"}} {count}')

            lines.extend(
                _header("strength_import_exercises_total", "Exercises found and created", "counter")
            )
            for kind, count in sorted(self._import_exercises.items()):
                lines.append(f'strength_import_exercises_total{{type="{kind}"}} {count}')

            lines.extend(self._render_histograms())
        return "\n".join(lines) + "\n"

    def _observe_histogram(
        self,
        name: str,
        labels: tuple[tuple[str, str], ...],
        value: float,
    ) -> None:
        key = (name, labels)
        self._histograms[key][self._bucket_for(value)] += 1
        self._hist_sum[key] += value
        self._hist_count[key] += 1

    def _render_histograms(self) -> list[str]:
        lines: list[str] = []
        seen: set[str] = set()
        for (name, labels), buckets in sorted(self._histograms.items()):
            if name not in seen:
                lines.extend(_header(name, f"{name} in milliseconds", "histogram"))
                seen.add(name)
            label_str = ",".join(f'{k}="{v}"' for k, v in labels)
            cumulative = 0
            for bound in self._buckets_ms:
                cumulative += buckets.get(str(bound), 0)
                lines.append(f'{name}_bucket{{{label_str},le="{bound}"}} {cumulative}')
            cumulative += buckets.get("+Inf", 0)
            lines.append(f'{name}_bucket{{{label_str},le="+Inf"}} {cumulative}')
            lines.append(f"{name}_sum{{{label_str}}} {self._hist_sum[(name, labels)]:.2f}")
            lines.append(f"{name}_count{{{label_str}}} {self._hist_count[(name, labels)]}")
        return lines

    def _bucket_for(self, duration_ms: float) -> str:
        for bound in self._buckets_ms:
            if duration_ms <= bound:
                return str(bound)
        return "+Inf"


def _header(name: str, help_text: str, metric_type: str) -> list[str]:
    return [f"# HELP {name} {help_text}", f"# TYPE {name} {metric_type}"]


class PrometheusMetrics:
    """Prometheus client-based metrics backend."""

    def __init__(self, buckets_ms: Iterable[int]) -> None:
        from prometheus_client import CollectorRegistry, Counter, Histogram

        self._registry = CollectorRegistry()
        buckets = list(buckets_ms)

        self._http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "Request duration in milliseconds",
            ["method", "path"],
            buckets=buckets,
            registry=self._registry,
        )
        self._external_api_requests_total = Counter(
            "external_api_requests_total",
            "External API requests",
            ["provider", "operation", "status"],
            registry=self._registry,
        )
        self._external_api_duration_ms = Histogram(
            "external_api_duration_ms",
            "External API duration in milliseconds",
            ["provider", "operation"],
            buckets=buckets,
            registry=self._registry,
        )
        self._downloads_total = Counter(
            "activity_file_downloads_total",
            "Activity file download attempts",
            ["status"],
            registry=self._registry,
        )
        self._download_bytes_total = Counter(
            "activity_file_download_bytes_total",
            "Activity file bytes downloaded",
            ["status"],
            registry=self._registry,
        )
        self._imports_total = Counter(
            "strength_imports_total",
            "Strength import runs",
            ["outcome"],
            registry=self._registry,
        )
        self._import_exercises_total = Counter(
            "strength_import_exercises_total",
            "Exercises found and created",
            ["type"],
            registry=self._registry,
        )
        self._import_duration_ms = Histogram(
            "strength_import_duration_ms",
            "Strength import duration in milliseconds",
            ["outcome"],
            buckets=buckets,
            registry=self._registry,
        )

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        self._http_requests_total.labels(method, path, str(status_code)).inc()
        self._http_request_duration_ms.labels(method, path).observe(duration_ms)

    def observe_external_api(
        self,
        provider: str,
        operation: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        self._external_api_requests_total.labels(provider, operation, str(status_code)).inc()
        self._external_api_duration_ms.labels(provider, operation).observe(duration_ms)

    def observe_file_download(self, size_bytes: int, success: bool) -> None:
        status = "success" if success else "error"
        self._downloads_total.labels(status).inc()
        if success and size_bytes > 0:
            self._download_bytes_total.labels(status).inc(size_bytes)

    def observe_import(
        self,
        outcome: str,
        duration_ms: float,
        exercises_found: int = 0,
        exercises_created: int = 0,
    ) -> None:
        self._imports_total.labels(outcome).inc()
        self._import_exercises_total.labels("found").inc(exercises_found)
        self._import_exercises_total.labels("created").inc(exercises_created)
        self._import_duration_ms.labels(outcome).observe(duration_ms)

    def render_prometheus(self) -> str:
        from prometheus_client import generate_latest

        return generate_latest(self._registry).decode("utf-8")


_metrics_backend: MetricsBackend | None = None


def get_metrics_backend() -> MetricsBackend:
    """Return a cached metrics backend instance."""
    global _metrics_backend
    if _metrics_backend is None:
        settings = get_settings()
        _metrics_backend = _build_metrics_backend(settings.metrics_backend)
    return _metrics_backend


def _build_metrics_backend(backend: str) -> MetricsBackend:
    if backend == "prometheus":
        return PrometheusMetrics(DEFAULT_BUCKETS_MS)
    return MetricsCollector(DEFAULT_BUCKETS_MS)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Attach request_id, log request/response, and emit metrics."""

    def __init__(
        self,
        app: ASGIApp,
        metrics: MetricsBackend | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics or get_metrics_backend()
        self.logger = logger or logging.getLogger("strength_sync.request")

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            status_code = response.status_code if response else 500

            if response is not None:
                response.headers["X-Request-ID"] = request_id

            route = request.scope.get("route")
            route_path = getattr(route, "path", None)
            # Normalize unmatched paths to avoid label cardinality explosion
            path = route_path or "/__unknown__"

            if self.metrics:
                self.metrics.observe_request(request.method, path, status_code, duration_ms)

            self.logger.info(
                json.dumps(
                    {
                        "request_id": request_id,
                        "method": request.method,
                        "path": request.url.path,
                        "route": route_path,
                        "status_code": status_code,
                        "elapsed_ms": round(duration_ms, 2),
                        "client": request.client.host if request.client else None,
                    }
                )
            )
            request_id_ctx.reset(token)
