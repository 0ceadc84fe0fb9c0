"""Stats normalization: raw runtime snapshot -> derived container metrics.

Everything here is pure computation. Data-quality problems (missing cgroup keys,
zero denominators, unknown interfaces) never raise; they fall back to a safe value
and are reported through NormalizedMetrics.warnings.

Memory note: usage reported by the runtime includes the kernel page cache. It is
subtracted to approximate the memory the container really uses. cgroup v1 exposes
the cache as "cache", cgroup v2 as "file". Docker's own CLI subtracts
inactive_file instead; the page cache is used here to stay comparable with
earlier dashboards.

Further reading:
  - https://docs.kernel.org/admin-guide/cgroup-v1/memory.html#stat-file
  - https://docs.kernel.org/admin-guide/cgroup-v2.html#memory-interface-files
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from dex_exporter.core.constants import (
    CGROUP_V1_CACHE_KEY,
    CGROUP_V2_FILE_KEY,
    DEFAULT_NETWORK_INTERFACE,
    NANOSECONDS_PER_SECOND,
)
from dex_exporter.core.schemas import BlkioEntry, MemoryStats, NetworkStats, RawStatsSnapshot
from dex_exporter.monitoring.base import NormalizedMetrics


def normalize(
    snapshot: RawStatsSnapshot,
    network_interfaces: Sequence[str] = (DEFAULT_NETWORK_INTERFACE,),
) -> NormalizedMetrics:
    """Derive emission-ready metrics from one stats snapshot.

    Args:
        snapshot: Raw stats for a running container
        network_interfaces: Interfaces summed into rx/tx bytes. Empty = all interfaces

    Returns:
        NormalizedMetrics. Calling this twice on the same snapshot gives equal results.
    """
    warnings: list[str] = []

    cpu_percent = cpu_utilization_percent(snapshot, warnings)
    cpu_seconds = snapshot.cpu_stats.cpu_usage.total_usage / NANOSECONDS_PER_SECOND

    memory_usage = memory_usage_bytes(snapshot.memory_stats, warnings)
    memory_total = snapshot.memory_stats.limit
    if memory_total > 0:
        memory_percent = memory_usage / memory_total * 100.0
    else:
        warnings.append("memory limit is 0, memory utilization reported as 0")
        memory_percent = 0.0

    rx_bytes, tx_bytes = network_bytes(snapshot.networks, network_interfaces, warnings)
    read_bytes, write_bytes = block_io_bytes(snapshot.blkio_stats.io_service_bytes_recursive)

    return NormalizedMetrics(
        running=True,
        cpu_utilization_percent=cpu_percent,
        cpu_total_seconds=cpu_seconds,
        memory_usage_bytes=memory_usage,
        memory_total_bytes=memory_total,
        memory_utilization_percent=memory_percent,
        network_rx_bytes=rx_bytes,
        network_tx_bytes=tx_bytes,
        block_read_bytes=read_bytes,
        block_write_bytes=write_bytes,
        pids_current=snapshot.pids_stats.current,
        warnings=tuple(warnings),
    )


def cpu_utilization_percent(snapshot: RawStatsSnapshot, warnings: list[str]) -> float:
    """CPU share of the host since the previous runtime sample, in percent.

    Not multiplied by the number of CPUs: 100% means the whole host.
    """
    cpu_delta = (
        snapshot.cpu_stats.cpu_usage.total_usage - snapshot.precpu_stats.cpu_usage.total_usage
    )
    system_delta = snapshot.cpu_stats.system_cpu_usage - snapshot.precpu_stats.system_cpu_usage

    if system_delta <= 0:
        warnings.append(f"system CPU delta is {system_delta}, CPU utilization reported as 0")
        return 0.0
    if cpu_delta < 0:
        warnings.append(
            f"CPU usage went backwards by {-cpu_delta}ns, CPU utilization reported as 0"
        )
        return 0.0

    return cpu_delta / system_delta * 100.0


def memory_usage_bytes(memory: MemoryStats, warnings: list[str]) -> int:
    """Memory usage without the kernel page cache."""
    # cgroup v2 wins if a runtime ever reports both keys
    if CGROUP_V2_FILE_KEY in memory.stats:
        cache = memory.stats[CGROUP_V2_FILE_KEY]
    elif CGROUP_V1_CACHE_KEY in memory.stats:
        cache = memory.stats[CGROUP_V1_CACHE_KEY]
    else:
        warnings.append(
            f'could not find "{CGROUP_V1_CACHE_KEY}" stat (cgroup v1) '
            f'nor "{CGROUP_V2_FILE_KEY}" stat (cgroup v2)'
        )
        return memory.usage

    if cache > memory.usage:
        warnings.append(f"page cache ({cache}) exceeds memory usage ({memory.usage})")
        return 0
    return memory.usage - cache


def network_bytes(
    networks: dict[str, NetworkStats],
    interfaces: Sequence[str],
    warnings: list[str],
) -> tuple[int, int]:
    """Sum received/transmitted bytes over the selected interfaces."""
    selected: Iterable[str] = interfaces or sorted(networks)

    rx_total = 0
    tx_total = 0
    for iface in selected:
        stats = networks.get(iface)
        if stats is None:
            warnings.append(f'network interface "{iface}" not found')
            continue
        rx_total += stats.rx_bytes
        tx_total += stats.tx_bytes

    return rx_total, tx_total


def block_io_bytes(entries: Iterable[BlkioEntry]) -> tuple[int, int]:
    """Total bytes read and written. Operations other than read/write are ignored."""
    read_total = 0
    write_total = 0

    for entry in entries:
        op = entry.op.lower()
        if op == "read":
            read_total += entry.value
        elif op == "write":
            write_total += entry.value

    return read_total, write_total
