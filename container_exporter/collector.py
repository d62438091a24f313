"""
Prometheus collector that reads Docker container stats on every scrape.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import List, Optional

from prometheus_client.core import GaugeMetricFamily

from container_exporter.docker_client import DockerStatsClient
from container_exporter.errors import EnumerationError, FetchError
from container_exporter.metrics import DESCRIPTORS, build_families
from container_exporter.stats import ContainerMetrics, derive_metrics

logger = logging.getLogger(__name__)


class DockerCollector:
    """
    Custom collector emitting CPU and memory gauges per running container.

    Each call to ``collect()`` lists the running containers and fetches one
    stats snapshot per container. A container whose stats cannot be read is
    skipped; a failure to list containers yields empty families. Nothing is
    kept between scrapes.
    """

    def __init__(
        self,
        stats_client: DockerStatsClient,
        fetch_workers: int = 1,
        scrape_timeout: Optional[float] = None
    ):
        """
        Args:
            stats_client: Client used to list containers and fetch stats.
            fetch_workers: Number of concurrent stats fetches. 1 fetches sequentially.
            scrape_timeout: Seconds after which a scrape publishes what it has gathered.
                Fetches still running in the pool at that point are abandoned, not
                interrupted; each thread lives until the Docker client timeout ends its call.
        """
        if fetch_workers < 1:
            raise ValueError("fetch_workers must be at least 1")
        self.stats_client = stats_client
        self.fetch_workers = fetch_workers
        self.scrape_timeout = scrape_timeout

    def describe(self) -> List[GaugeMetricFamily]:
        """Return the static metric descriptors without touching Docker."""
        return [descriptor.family() for descriptor in DESCRIPTORS]

    def collect(self) -> List[GaugeMetricFamily]:
        """Collect CPU and memory gauges for all running containers."""
        start_time = time.monotonic()
        deadline = start_time + self.scrape_timeout if self.scrape_timeout else None

        try:
            container_ids = self.stats_client.list_container_ids()
        except EnumerationError as e:
            logger.error(f"Skipping scrape: {e}")
            return build_families([])

        if self.fetch_workers > 1 and len(container_ids) > 1:
            results = self._collect_concurrent(container_ids, deadline)
        else:
            results = self._collect_sequential(container_ids, deadline)

        logger.debug(
            f"Scraped {len(results)}/{len(container_ids)} containers "
            f"in {time.monotonic() - start_time:.2f} seconds"
        )
        return build_families(results)

    def _collect_sequential(self, container_ids: List[str], deadline: Optional[float]) -> List[ContainerMetrics]:
        results = []
        for index, container_id in enumerate(container_ids):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    f"Scrape timeout reached, skipping {len(container_ids) - index} remaining containers"
                )
                break

            metrics = self._container_metrics(container_id)
            if metrics is not None:
                results.append(metrics)
        return results

    def _collect_concurrent(self, container_ids: List[str], deadline: Optional[float]) -> List[ContainerMetrics]:
        executor = ThreadPoolExecutor(
            max_workers=min(self.fetch_workers, len(container_ids)),
            thread_name_prefix='stats-fetch'
        )
        futures = {
            executor.submit(self._container_metrics, container_id): index
            for index, container_id in enumerate(container_ids)
        }

        # Keep enumeration order regardless of completion order
        ordered: List[Optional[ContainerMetrics]] = [None] * len(container_ids)
        try:
            timeout = max(deadline - time.monotonic(), 0) if deadline is not None else None
            for future in as_completed(futures, timeout=timeout):
                ordered[futures[future]] = future.result()
        except FuturesTimeoutError:
            pending = sum(1 for future in futures if not future.done())
            logger.warning(f"Scrape timeout reached, abandoning {pending} pending stats fetches")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return [metrics for metrics in ordered if metrics is not None]

    def _container_metrics(self, container_id: str) -> Optional[ContainerMetrics]:
        try:
            snapshot = self.stats_client.fetch_stats(container_id)
            return derive_metrics(snapshot)
        except FetchError as e:
            logger.warning(f"Failed to get metrics for container {e}")
        except Exception as e:
            logger.error(f"Unexpected error collecting metrics for container {container_id}: {e}", exc_info=True)
        return None
