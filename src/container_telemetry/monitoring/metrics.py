"""Metric derivation from raw Docker stats snapshots.

Pure functions turning cumulative counters into point-in-time figures:

Functions:
    bytes_to_mb: Convert bytes to megabytes
    calculate_cpu_percent: CPU utilization from the current/previous CPU reads
    calculate_memory_percent: Memory usage as a percentage of the limit
    calculate_network: Received/transmitted bytes summed over interfaces
    calculate_block_io: Read/written bytes summed over blkio entries
    derive_metrics: All of the above for one snapshot
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from container_telemetry.core.constants import BYTES_PER_MB
from container_telemetry.core.schemas import (
    BlkioEntry,
    DerivedMetrics,
    NetworkStats,
    StatsSnapshot,
)


def bytes_to_mb(byte_count: int | float) -> float:
    """Convert bytes to megabytes.

    Args:
        byte_count: Number of bytes

    Returns:
        Megabytes (float)
    """
    return byte_count / BYTES_PER_MB


def calculate_cpu_percent(snapshot: StatsSnapshot) -> float:
    """Calculate CPU percentage from the current and previous CPU reads.

    The container delta is scaled by the host-wide delta and the number of
    online CPUs. When the runtime reports zero online CPUs the length of the
    per-core usage array is used instead.

    Args:
        snapshot: Stats snapshot carrying cpu_stats and precpu_stats

    Returns:
        CPU percentage, 0.0 unless both deltas are strictly positive
    """
    cpu = snapshot.cpu_stats
    precpu = snapshot.precpu_stats

    cpu_delta = cpu.cpu_usage.total_usage - precpu.cpu_usage.total_usage
    system_delta = cpu.system_cpu_usage - precpu.system_cpu_usage

    online_cpus = cpu.online_cpus or len(cpu.cpu_usage.percpu_usage)

    if system_delta > 0 and cpu_delta > 0:
        return (cpu_delta / system_delta) * online_cpus * 100.0
    return 0.0


def calculate_memory_percent(usage: int, limit: int) -> float:
    """Compute memory usage as a percentage of the limit.

    Args:
        usage: Memory usage in bytes
        limit: Memory limit in bytes

    Returns:
        Percentage of the limit in use, 0.0 if no limit is reported
    """
    if limit <= 0:
        return 0.0
    return 100.0 * usage / limit


def calculate_network(networks: Mapping[str, NetworkStats]) -> tuple[float, float]:
    """Sum received and transmitted bytes across all interfaces."""
    net_read = 0.0
    net_write = 0.0
    for stats in networks.values():
        net_read += stats.rx_bytes
        net_write += stats.tx_bytes
    return net_read, net_write


def calculate_block_io(entries: Iterable[BlkioEntry]) -> tuple[float, float]:
    """Sum block I/O bytes by operation.

    Operation names are matched case-insensitively; anything other than
    'read' or 'write' (sync, async, total, ...) is ignored.

    Args:
        entries: io_service_bytes_recursive entries

    Returns:
        Tuple of (read_bytes, write_bytes)
    """
    blk_read = 0.0
    blk_write = 0.0
    for entry in entries:
        op = entry.op.lower()
        if op == "read":
            blk_read += entry.value
        elif op == "write":
            blk_write += entry.value
    return blk_read, blk_write


def derive_metrics(snapshot: StatsSnapshot) -> DerivedMetrics:
    """Derive every emitted metric from one snapshot."""
    net_read, net_write = calculate_network(snapshot.networks)
    blk_read, blk_write = calculate_block_io(snapshot.blkio_entries)
    memory = snapshot.memory_stats

    return DerivedMetrics(
        cpu_percent=calculate_cpu_percent(snapshot),
        memory_mb=bytes_to_mb(memory.usage),
        memory_percent=calculate_memory_percent(memory.usage, memory.limit),
        net_read_mb=bytes_to_mb(net_read),
        net_write_mb=bytes_to_mb(net_write),
        blk_read_mb=bytes_to_mb(blk_read),
        blk_write_mb=bytes_to_mb(blk_write),
        pids=snapshot.pids,
    )
