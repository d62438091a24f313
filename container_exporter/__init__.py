"""
Docker Container Stats Exporter for Prometheus

Exposes per-container CPU and memory usage, read from the Docker API on every
scrape, as two gauges labeled by container ID.
"""

__version__ = "1.0.0"
