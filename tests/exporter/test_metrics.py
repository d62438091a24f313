"""
Tests for metric descriptors and publishing
"""
import pytest
from prometheus_client import CollectorRegistry, generate_latest

from container_exporter.metrics import (
    CPU_USAGE, MEMORY_USAGE, DESCRIPTORS, build_families, build_fq_name
)
from container_exporter.stats import ContainerMetrics


def test_build_fq_name():
    """Test name parts are joined and empty parts skipped"""
    assert build_fq_name('docker_exporter', '', 'cpu_usage_percent') == 'docker_exporter_cpu_usage_percent'
    assert build_fq_name('ns', 'sub', 'name') == 'ns_sub_name'
    assert build_fq_name('', '', 'name') == 'name'


def test_descriptor_constants():
    """Test the two exported metric descriptors"""
    assert CPU_USAGE.name == 'docker_exporter_cpu_usage_percent'
    assert CPU_USAGE.documentation == 'Container CPU Usage Percentage'
    assert MEMORY_USAGE.name == 'docker_exporter_memory_usage_bytes'
    assert MEMORY_USAGE.documentation == 'Container Memory Usage in bytes'
    assert DESCRIPTORS == (CPU_USAGE, MEMORY_USAGE)
    for descriptor in DESCRIPTORS:
        assert descriptor.labels == ('container_id',)


def test_descriptors_are_immutable():
    with pytest.raises(AttributeError):
        CPU_USAGE.name = 'other'


def test_build_families_two_samples_per_container():
    """Test one CPU and one memory sample per result"""
    cpu_family, memory_family = build_families([
        ContainerMetrics('abc123', 40.0, 94371840),
        ContainerMetrics('def456', 0.0, 0),
    ])

    assert [(s.labels, s.value) for s in cpu_family.samples] == [
        ({'container_id': 'abc123'}, 40.0),
        ({'container_id': 'def456'}, 0.0),
    ]
    assert [(s.labels, s.value) for s in memory_family.samples] == [
        ({'container_id': 'abc123'}, 94371840.0),
        ({'container_id': 'def456'}, 0.0),
    ]


def test_build_families_empty():
    """Test no results still yields both families"""
    families = build_families([])

    assert [family.name for family in families] == [CPU_USAGE.name, MEMORY_USAGE.name]
    assert all(family.samples == [] for family in families)


def test_exposition_text():
    """Test families render in the text exposition format"""
    class StaticCollector:
        def collect(self):
            return build_families([ContainerMetrics('abc123', 40.0, 94371840)])

    registry = CollectorRegistry()
    registry.register(StaticCollector())

    output = generate_latest(registry).decode()

    assert '# HELP docker_exporter_cpu_usage_percent Container CPU Usage Percentage' in output
    assert '# TYPE docker_exporter_memory_usage_bytes gauge' in output
    assert 'docker_exporter_cpu_usage_percent{container_id="abc123"} 40.0' in output
    assert 'docker_exporter_memory_usage_bytes{container_id="abc123"} 9.437184e+07' in output
