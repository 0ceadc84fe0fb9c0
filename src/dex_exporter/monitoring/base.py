"""Base types for container metrics collection.

The collector talks to the container runtime only through the RuntimeAdapter
interface, so the Docker implementation can be swapped for a fake in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from dex_exporter.core.constants import CONTAINER_NAME_SEPARATOR
from dex_exporter.core.schemas import MetricKind

if TYPE_CHECKING:
    from types import TracebackType

    from dex_exporter.core.schemas import RawStatsSnapshot


class RuntimeAdapterError(Exception):
    """Base exception for container runtime failures."""


class ContainerListError(RuntimeAdapterError):
    """Listing containers failed. Aborts the whole collection cycle."""


class StatsFetchError(RuntimeAdapterError):
    """Fetching stats for one container failed."""

    def __init__(self, container_id: str, message: str) -> None:
        self.container_id = container_id
        super().__init__(f"Stats for container {container_id[:12]}: {message}")


class StatsDecodeError(StatsFetchError):
    """The runtime answered, but the stats document could not be decoded."""


class ContainerState(str, Enum):
    RUNNING = "running"
    OTHER = "other"


@dataclass(frozen=True)
class ContainerInfo:
    """A container as listed by the runtime during one collection cycle."""

    id: str
    names: tuple[str, ...] = ()
    state: ContainerState = ContainerState.OTHER

    @property
    def is_running(self) -> bool:
        return self.state is ContainerState.RUNNING

    @property
    def display_name(self) -> str:
        """Name used as the metric label.

        All names joined with ";", then a single leading "/" stripped.
        """
        name = CONTAINER_NAME_SEPARATOR.join(self.names)
        if name.startswith("/"):
            name = name[1:]
        return name


@dataclass(frozen=True)
class NormalizedMetrics:
    """Derived, emission-ready values for one running container.

    Unsigned runtime counters stay ints; ratios and seconds are floats.
    """

    running: bool = True
    cpu_utilization_percent: float = 0.0
    cpu_total_seconds: float = 0.0
    memory_usage_bytes: int = 0
    memory_total_bytes: int = 0
    memory_utilization_percent: float = 0.0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    block_read_bytes: int = 0
    block_write_bytes: int = 0
    pids_current: int = 0
    # Data-quality conditions found while normalizing
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricPoint:
    """The sole emission unit handed to the metric sink."""

    name: str
    kind: MetricKind
    value: float
    labels: dict[str, str] = field(default_factory=dict)


class RuntimeAdapter(ABC):
    """Abstract access to a container runtime.

    Implementations:
    - DockerRuntimeAdapter: Docker Engine API via the docker SDK
    """

    @abstractmethod
    def list_containers(self, include_stopped: bool = True) -> list[ContainerInfo]:
        """List containers known to the runtime.

        Args:
            include_stopped: Also return containers that are not running

        Raises:
            ContainerListError: If the runtime could not be queried
        """

    @abstractmethod
    def fetch_stats(self, container_id: str) -> RawStatsSnapshot:
        """Fetch a single (non-streaming) stats snapshot for a container.

        Raises:
            StatsFetchError: If the request failed
            StatsDecodeError: If the response could not be decoded
        """

    def close(self) -> None:
        """Release the connection to the runtime."""

    def __enter__(self) -> RuntimeAdapter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
