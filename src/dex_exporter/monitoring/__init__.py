"""Monitoring module - container stats collection and normalization.

Provides:
- RuntimeAdapter / DockerRuntimeAdapter: Access to the container runtime
- normalize: Raw stats snapshot -> derived metrics
- ContainerCollector: One concurrent collection cycle per scrape
"""

from __future__ import annotations

from dex_exporter.monitoring.base import (
    ContainerInfo,
    ContainerListError,
    ContainerState,
    MetricPoint,
    NormalizedMetrics,
    RuntimeAdapter,
    RuntimeAdapterError,
    StatsDecodeError,
    StatsFetchError,
)
from dex_exporter.monitoring.collector import (
    DERIVED_METRICS,
    METRICS,
    RUNNING_METRIC,
    ContainerCollector,
    MetricDefinition,
    derive_points,
    running_point,
)
from dex_exporter.monitoring.docker_adapter import DockerRuntimeAdapter
from dex_exporter.monitoring.normalizer import normalize

__all__ = [
    "ContainerCollector",
    "ContainerInfo",
    "ContainerListError",
    "ContainerState",
    "DERIVED_METRICS",
    "derive_points",
    "DockerRuntimeAdapter",
    "METRICS",
    "MetricDefinition",
    "MetricPoint",
    "normalize",
    "NormalizedMetrics",
    "RUNNING_METRIC",
    "running_point",
    "RuntimeAdapter",
    "RuntimeAdapterError",
    "StatsDecodeError",
    "StatsFetchError",
]
