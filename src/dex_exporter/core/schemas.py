"""Pydantic schemas for the dex exporter.

This module defines the data contracts read from the outside world: the exporter
configuration and the raw statistics document returned by the container runtime.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from dex_exporter.core.constants import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_NETWORK_INTERFACE,
    DEFAULT_PORT,
)


class MetricKind(str, Enum):
    """Prometheus-style metric kinds emitted by the collector."""

    GAUGE = "gauge"  # Current state, may go up and down
    COUNTER = "counter"  # Cumulative value


class ExporterConfig(BaseModel):
    """Top-level exporter configuration.

    This is the main configuration loaded from YAML/JSON files.
    """

    listen_address: str = Field(default=DEFAULT_LISTEN_ADDRESS, description="HTTP bind address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="HTTP port")
    docker_host: str | None = Field(
        default=None, description="Docker daemon URL. None = use environment (DOCKER_HOST)"
    )
    docker_timeout_seconds: int = Field(
        default=10, ge=1, description="Timeout for a single Docker API request"
    )
    include_stopped: bool = Field(
        default=True, description="Also report stopped containers (running=0)"
    )
    max_workers: int = Field(
        default=DEFAULT_MAX_WORKERS,
        ge=1,
        le=256,
        description="Maximum concurrent stats requests per scrape",
    )
    network_interfaces: list[str] = Field(
        default_factory=lambda: [DEFAULT_NETWORK_INTERFACE],
        description="Interfaces summed into network metrics. Empty = all interfaces",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# RAW RUNTIME STATISTICS
# =============================================================================


class _RawModel(BaseModel):
    """Base for raw stats models: unknown runtime fields are ignored."""

    model_config = {"extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat JSON null as "field absent" so defaults apply."""
        if v is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return v


class CPUUsage(_RawModel):
    """Cumulative CPU time consumed by the container."""

    total_usage: int = Field(default=0, ge=0, description="Total CPU time in nanoseconds")


class CPUStats(_RawModel):
    """One CPU reading: container usage plus host system usage."""

    cpu_usage: CPUUsage = Field(default_factory=CPUUsage)
    system_cpu_usage: int = Field(default=0, ge=0, description="Host CPU time in nanoseconds")


class MemoryStats(_RawModel):
    """Memory usage, limit and the per-key cgroup accounting."""

    usage: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)
    stats: dict[str, int] = Field(default_factory=dict)


class NetworkStats(_RawModel):
    """Byte counters for one network interface."""

    rx_bytes: int = Field(default=0, ge=0)
    tx_bytes: int = Field(default=0, ge=0)


class BlkioEntry(_RawModel):
    """One block I/O accounting entry (per device and operation)."""

    op: str = ""
    value: int = Field(default=0, ge=0)


class BlkioStats(_RawModel):
    io_service_bytes_recursive: list[BlkioEntry] = Field(default_factory=list)


class PidsStats(_RawModel):
    current: int = Field(default=0, ge=0)


class RawStatsSnapshot(_RawModel):
    """A single stats document for one container, as returned by the runtime.

    Attributes:
        cpu_stats: Current CPU reading
        precpu_stats: CPU reading from the previous runtime sample
        memory_stats: Memory usage, limit and accounting keys
        networks: Interface name -> byte counters
        blkio_stats: Block I/O entries
        pids_stats: Process count
    """

    cpu_stats: CPUStats = Field(default_factory=CPUStats)
    precpu_stats: CPUStats = Field(default_factory=CPUStats)
    memory_stats: MemoryStats = Field(default_factory=MemoryStats)
    networks: dict[str, NetworkStats] = Field(default_factory=dict)
    blkio_stats: BlkioStats = Field(default_factory=BlkioStats)
    pids_stats: PidsStats = Field(default_factory=PidsStats)
