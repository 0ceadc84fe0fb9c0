"""dex exporter - Docker container metrics for Prometheus."""

from __future__ import annotations

from dex_exporter.core.schemas import ExporterConfig, MetricKind, RawStatsSnapshot
from dex_exporter.monitoring.base import ContainerInfo, MetricPoint, NormalizedMetrics
from dex_exporter.monitoring.collector import ContainerCollector
from dex_exporter.monitoring.normalizer import normalize

__version__ = "0.1.0"

__all__ = [
    "ContainerCollector",
    "ContainerInfo",
    "ExporterConfig",
    "MetricKind",
    "MetricPoint",
    "NormalizedMetrics",
    "RawStatsSnapshot",
    "normalize",
    "__version__",
]
