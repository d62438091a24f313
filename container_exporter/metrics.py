"""
Prometheus metric definitions for Docker container statistics.

Both metrics are gauges labeled only by container ID. The descriptors are
module-level constants shared by every scrape.
"""

from typing import Iterable, List, NamedTuple, Tuple

from prometheus_client.core import GaugeMetricFamily

from container_exporter.stats import ContainerMetrics

NAMESPACE = 'docker_exporter'
CONTAINER_ID_LABEL = 'container_id'


class MetricDescriptor(NamedTuple):
    """Name, help text and label names of an exported metric."""
    name: str
    documentation: str
    labels: Tuple[str, ...]

    def family(self) -> GaugeMetricFamily:
        """Create an empty gauge family for this descriptor."""
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores."""
    return '_'.join(part for part in (namespace, subsystem, name) if part)


# CPU usage as a percentage of one CPU, summed across CPUs
CPU_USAGE = MetricDescriptor(
    build_fq_name(NAMESPACE, '', 'cpu_usage_percent'),
    'Container CPU Usage Percentage',
    (CONTAINER_ID_LABEL,)
)

# Memory usage excluding page cache
MEMORY_USAGE = MetricDescriptor(
    build_fq_name(NAMESPACE, '', 'memory_usage_bytes'),
    'Container Memory Usage in bytes',
    (CONTAINER_ID_LABEL,)
)

DESCRIPTORS = (CPU_USAGE, MEMORY_USAGE)


def build_families(results: Iterable[ContainerMetrics]) -> List[GaugeMetricFamily]:
    """
    Publish derived metrics as gauge families.

    Args:
        results: Derived metrics, one entry per container.

    Returns:
        The CPU and memory families, in that order. Empty when there are no results.
    """
    cpu_family = CPU_USAGE.family()
    memory_family = MEMORY_USAGE.family()

    for result in results:
        cpu_family.add_metric([result.container_id], result.cpu_percent)
        memory_family.add_metric([result.container_id], float(result.memory_bytes))

    return [cpu_family, memory_family]
