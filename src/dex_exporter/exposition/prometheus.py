"""Prometheus exposition of collected container metrics.

DexPrometheusCollector plugs a ContainerCollector into a prometheus_client
registry: every scrape of /metrics runs exactly one collection cycle.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from dex_exporter.core.schemas import MetricKind
from dex_exporter.monitoring.base import MetricPoint
from dex_exporter.monitoring.collector import METRICS, ContainerCollector

logger = logging.getLogger(__name__)

_DOCUMENTATION = {definition.name: definition.documentation for definition in METRICS}


def to_metric_families(points: Iterable[MetricPoint]) -> list[Metric]:
    """Group metric points into Prometheus metric families, one per name.

    Sample names are kept exactly as given. For counters the family name drops a
    trailing "_total", since prometheus_client appends it to the TYPE line.
    """
    families: dict[str, Metric] = {}

    for point in points:
        family = families.get(point.name)
        if family is None:
            family_name = point.name
            if point.kind is MetricKind.COUNTER and family_name.endswith("_total"):
                family_name = family_name[: -len("_total")]
            documentation = _DOCUMENTATION.get(point.name, point.name)
            family = Metric(family_name, documentation, point.kind.value)
            families[point.name] = family
        family.add_sample(point.name, dict(point.labels), point.value)

    return list(families.values())


class DexPrometheusCollector(Collector):
    """Custom prometheus_client collector backed by a ContainerCollector."""

    def __init__(self, container_collector: ContainerCollector) -> None:
        self._container_collector = container_collector

    def describe(self) -> list[Metric]:
        # Nothing to describe up front: registering must not call the runtime
        return []

    def collect(self) -> Iterator[Metric]:
        yield from to_metric_families(self._container_collector.collect())


def build_registry(container_collector: ContainerCollector) -> CollectorRegistry:
    """Create a dedicated registry holding only the container metrics."""
    registry = CollectorRegistry(auto_describe=False)
    registry.register(DexPrometheusCollector(container_collector))
    return registry


def make_metrics_app(registry: CollectorRegistry) -> Callable[..., Any]:
    """WSGI app serving the registry in the classic Prometheus text format.

    OpenMetrics is never negotiated: it requires counter samples to end in
    "_total", and most dex_* counter names do not.
    """
    app = make_wsgi_app(registry)

    def metrics_app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Any:
        environ = dict(environ)
        environ.pop("HTTP_ACCEPT", None)
        return app(environ, start_response)

    return metrics_app


class _LoggingRequestHandler(WSGIRequestHandler):
    """Request handler that logs through logging instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")


def serve(registry: CollectorRegistry, address: str, port: int) -> WSGIServer:
    """Start the /metrics HTTP endpoint in a background thread.

    Returns:
        The running server; call shutdown() to stop it
    """
    server = make_server(
        address,
        port,
        make_metrics_app(registry),
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingRequestHandler,
    )
    thread = threading.Thread(target=server.serve_forever, name="dex-http", daemon=True)
    thread.start()
    logger.info(f"Serving metrics on http://{address}:{server.server_port}/metrics")
    return server
