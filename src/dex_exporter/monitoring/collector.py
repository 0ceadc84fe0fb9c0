"""Collection orchestrator.

One call to ContainerCollector.collect() is one scrape: list containers, fetch and
normalize stats for every running container concurrently, and return all metric
points as a single batch. Nothing is kept between calls, so concurrent scrapes
do not interfere with each other.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from dex_exporter.core.constants import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_NETWORK_INTERFACE,
    LABEL_CONTAINER_NAME,
    METRIC_PREFIX,
)
from dex_exporter.core.schemas import MetricKind
from dex_exporter.monitoring.base import (
    ContainerInfo,
    MetricPoint,
    NormalizedMetrics,
    RuntimeAdapter,
    RuntimeAdapterError,
)
from dex_exporter.monitoring.normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricDefinition:
    """Name, kind and help text of one exported metric."""

    name: str
    kind: MetricKind
    documentation: str
    # NormalizedMetrics attribute holding the value; None for the running gauge
    attribute: str | None = None


RUNNING_METRIC = MetricDefinition(
    f"{METRIC_PREFIX}container_running",
    MetricKind.GAUGE,
    "1 if docker container is running, 0 otherwise",
)

# Memory usage/total are exported as counters although they behave like gauges.
# Dashboards built on these names expect the counter type, so it is kept.
DERIVED_METRICS: tuple[MetricDefinition, ...] = (
    MetricDefinition(
        f"{METRIC_PREFIX}cpu_utilization_percent",
        MetricKind.GAUGE,
        "CPU utilization in percent",
        "cpu_utilization_percent",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}cpu_utilization_seconds_total",
        MetricKind.COUNTER,
        "Cumulative CPU utilization in seconds",
        "cpu_total_seconds",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}memory_usage_bytes",
        MetricKind.COUNTER,
        "Total memory usage bytes",
        "memory_usage_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}memory_total_bytes",
        MetricKind.COUNTER,
        "Total memory bytes",
        "memory_total_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}memory_utilization_percent",
        MetricKind.GAUGE,
        "Memory utilization percent",
        "memory_utilization_percent",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}network_rx_bytes",
        MetricKind.COUNTER,
        "Network received bytes total",
        "network_rx_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}network_tx_bytes",
        MetricKind.COUNTER,
        "Network sent bytes total",
        "network_tx_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}block_io_read_bytes",
        MetricKind.COUNTER,
        "Block I/O read bytes",
        "block_read_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}block_io_write_bytes",
        MetricKind.COUNTER,
        "Block I/O write bytes",
        "block_write_bytes",
    ),
    MetricDefinition(
        f"{METRIC_PREFIX}pids_current",
        MetricKind.COUNTER,
        "Current number of pids in the cgroup",
        "pids_current",
    ),
)

METRICS: tuple[MetricDefinition, ...] = (RUNNING_METRIC, *DERIVED_METRICS)


def running_point(container: ContainerInfo) -> MetricPoint:
    """The running gauge, emitted for every listed container."""
    return MetricPoint(
        name=RUNNING_METRIC.name,
        kind=RUNNING_METRIC.kind,
        value=1.0 if container.is_running else 0.0,
        labels={LABEL_CONTAINER_NAME: container.display_name},
    )


def derive_points(container_name: str, metrics: NormalizedMetrics) -> list[MetricPoint]:
    """All stats-derived points for one running container."""
    return [
        MetricPoint(
            name=definition.name,
            kind=definition.kind,
            value=float(getattr(metrics, definition.attribute)),
            labels={LABEL_CONTAINER_NAME: container_name},
        )
        for definition in DERIVED_METRICS
    ]


class ContainerCollector:
    """Runs collection cycles against a container runtime.

    Example:
        ```python
        collector = ContainerCollector(adapter, max_workers=8)
        for point in collector.collect():
            print(point.name, point.labels, point.value)
        ```
    """

    def __init__(
        self,
        adapter: RuntimeAdapter,
        max_workers: int = DEFAULT_MAX_WORKERS,
        network_interfaces: Sequence[str] = (DEFAULT_NETWORK_INTERFACE,),
        include_stopped: bool = True,
    ) -> None:
        """Initialize the collector.

        Args:
            adapter: Runtime access, owned by the caller
            max_workers: Maximum concurrent stats requests within one cycle
            network_interfaces: Interfaces summed into network metrics (empty = all)
            include_stopped: Also report stopped containers
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._adapter = adapter
        self._max_workers = max_workers
        self._network_interfaces = tuple(network_interfaces)
        self._include_stopped = include_stopped

    def collect(self) -> list[MetricPoint]:
        """Run one collection cycle.

        Never raises. If the container listing fails the batch is empty; a failing
        container only loses its own stats-derived points.

        Returns:
            All points of the cycle, grouped by container in listing order
        """
        try:
            containers = self._adapter.list_containers(include_stopped=self._include_stopped)
        except RuntimeAdapterError as e:
            logger.error(f"Can't list containers: {e}")
            return []
        except Exception:
            logger.exception("Unexpected error while listing containers")
            return []

        if not containers:
            logger.debug("No containers found")
            return []

        workers = min(self._max_workers, len(containers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dex-collect") as pool:
            # map() yields in submission order and the with-block waits for every task
            per_container = list(pool.map(self._process_container, containers))

        points = [point for batch in per_container for point in batch]
        logger.debug(f"Collected {len(points)} points from {len(containers)} containers")
        return points

    def _process_container(self, container: ContainerInfo) -> list[MetricPoint]:
        """Points for one container: running gauge plus stats when it is running."""
        name = container.display_name
        points = [running_point(container)]

        if not container.is_running:
            return points

        try:
            snapshot = self._adapter.fetch_stats(container.id)
            metrics = normalize(snapshot, self._network_interfaces)
        except RuntimeAdapterError as e:
            logger.warning(f"Skipping stats for container {name}: {e}")
            return points
        except Exception:
            logger.exception(f"Unexpected error collecting stats for container {name}")
            return points

        for warning in metrics.warnings:
            logger.warning(f"Container {name}: {warning}")

        points.extend(derive_points(name, metrics))
        return points
