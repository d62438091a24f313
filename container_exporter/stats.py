"""
Container statistics snapshots and the metrics derived from them.

A snapshot is decoded from one non-streaming Docker stats payload. The daemon
reports each CPU counter twice in that payload (``cpu_stats`` and
``precpu_stats``), so a rate can be derived without keeping any state between
scrapes.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from container_exporter.errors import DecodeError

logger = logging.getLogger(__name__)

_REQUIRED = object()


@dataclass(frozen=True)
class ContainerStatsSnapshot:
    """Point-in-time cumulative counters for one container."""
    container_id: str
    cpu_total_usage: int
    precpu_total_usage: int
    system_cpu_usage: int
    presystem_cpu_usage: int
    online_cpus: int
    memory_usage: int
    memory_cache: Optional[int] = None

    @classmethod
    def from_api(cls, container_id: str, stats: Dict[str, Any]) -> 'ContainerStatsSnapshot':
        """
        Decode a raw Docker stats payload.

        Args:
            container_id: ID of the container the payload belongs to.
            stats: Decoded JSON returned by the stats endpoint.

        Returns:
            ContainerStatsSnapshot

        Raises:
            DecodeError: If a required section or counter is missing or not numeric.
        """
        if not isinstance(stats, dict):
            raise DecodeError(container_id, f"expected a JSON object, got {type(stats).__name__}")

        cpu_stats = _section(container_id, stats, 'cpu_stats')
        precpu_stats = _section(container_id, stats, 'precpu_stats')
        memory_stats = _section(container_id, stats, 'memory_stats')

        # precpu counters are absent on the very first sample after start
        return cls(
            container_id=container_id,
            cpu_total_usage=_counter(container_id, cpu_stats, 'cpu_usage', 'total_usage'),
            precpu_total_usage=_counter(container_id, precpu_stats, 'cpu_usage', 'total_usage', default=0),
            system_cpu_usage=_counter(container_id, cpu_stats, 'system_cpu_usage'),
            presystem_cpu_usage=_counter(container_id, precpu_stats, 'system_cpu_usage', default=0),
            online_cpus=_online_cpus(cpu_stats),
            memory_usage=_counter(container_id, memory_stats, 'usage'),
            memory_cache=_counter(container_id, memory_stats, 'stats', 'cache', default=None),
        )


@dataclass(frozen=True)
class ContainerMetrics:
    """CPU percentage and working-set memory derived from one snapshot."""
    container_id: str
    cpu_percent: float
    memory_bytes: int


def derive_metrics(snapshot: ContainerStatsSnapshot) -> ContainerMetrics:
    """
    Compute CPU percentage and memory usage from a snapshot.

    CPU percentage is the container's share of host CPU time between the two
    samples, scaled by the number of CPUs. It is 0.0 when the host counter did
    not advance or the container counter went backwards (restart).

    Memory is the usage counter minus page cache, never below zero. A missing
    cache figure counts as zero.
    """
    cpu_delta = snapshot.cpu_total_usage - snapshot.precpu_total_usage
    system_delta = snapshot.system_cpu_usage - snapshot.presystem_cpu_usage

    cpu_percent = 0.0
    if system_delta > 0 and cpu_delta > 0:
        cpu_percent = (cpu_delta / system_delta) * snapshot.online_cpus * 100.0
    elif system_delta <= 0:
        logger.debug(f"No system CPU delta for container {snapshot.container_id}, reporting 0%")

    cache = snapshot.memory_cache or 0
    memory_bytes = max(snapshot.memory_usage - cache, 0)

    return ContainerMetrics(
        container_id=snapshot.container_id,
        cpu_percent=cpu_percent,
        memory_bytes=memory_bytes,
    )


def _section(container_id: str, stats: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = stats.get(key)
    if not isinstance(section, dict):
        raise DecodeError(container_id, f"missing '{key}' section")
    return section


def _counter(container_id: str, section: Dict[str, Any], *path: str, default: Any = _REQUIRED):
    value: Any = section
    for key in path:
        value = value.get(key) if isinstance(value, dict) else None
        if value is None:
            break

    if value is None:
        if default is _REQUIRED:
            raise DecodeError(container_id, f"missing counter '{'.'.join(path)}'")
        return default

    if not _is_number(value):
        raise DecodeError(container_id, f"counter '{'.'.join(path)}' is not numeric: {value!r}")
    return int(value)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid counter; JSON may also carry NaN or Infinity
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _online_cpus(cpu_stats: Dict[str, Any]) -> int:
    online_cpus = cpu_stats.get('online_cpus')
    if _is_number(online_cpus) and int(online_cpus) > 0:
        return int(online_cpus)

    # Older daemons only report the per-CPU breakdown
    percpu_usage = cpu_stats.get('cpu_usage', {}).get('percpu_usage') or []
    if percpu_usage:
        return len(percpu_usage)
    return 1
