"""Core module - configuration, constants and schemas."""

from __future__ import annotations

from dex_exporter.core.config import load_config
from dex_exporter.core.constants import LABEL_CONTAINER_NAME, METRIC_PREFIX
from dex_exporter.core.schemas import (
    BlkioEntry,
    BlkioStats,
    CPUStats,
    CPUUsage,
    ExporterConfig,
    MemoryStats,
    MetricKind,
    NetworkStats,
    PidsStats,
    RawStatsSnapshot,
)

__all__ = [
    "BlkioEntry",
    "BlkioStats",
    "CPUStats",
    "CPUUsage",
    "ExporterConfig",
    "LABEL_CONTAINER_NAME",
    "load_config",
    "MemoryStats",
    "METRIC_PREFIX",
    "MetricKind",
    "NetworkStats",
    "PidsStats",
    "RawStatsSnapshot",
]
