"""
Docker API Client for collecting container statistics.

This module wraps the Docker SDK's low-level API client with the two calls the
exporter needs: listing running containers and reading one stats snapshot per
container.
"""

import logging
from typing import List, Optional

import docker
import requests
from docker.errors import DockerException

from container_exporter.errors import DecodeError, EnumerationError, FetchError
from container_exporter.stats import ContainerStatsSnapshot

logger = logging.getLogger(__name__)

# Transport failures surface as requests exceptions rather than DockerException
CLIENT_ERRORS = (DockerException, requests.exceptions.RequestException)


class DockerStatsClient:
    """Reads running containers and their stats from the Docker daemon."""

    def __init__(self, client: docker.DockerClient):
        """
        Args:
            client: Connected Docker SDK client.
        """
        self.client = client

    @classmethod
    def connect(
        cls,
        base_url: Optional[str] = None,
        version: str = '1.41',
        timeout: int = 60
    ) -> 'DockerStatsClient':
        """
        Connect to the Docker daemon and verify the connection.

        Args:
            base_url: Optional daemon URL or socket path. If None, uses the environment.
            version: Docker API version to request.
            timeout: Per-request timeout in seconds.

        Raises:
            DockerException: If the daemon cannot be reached.
        """
        try:
            if base_url:
                client = docker.DockerClient(base_url=base_url, version=version, timeout=timeout)
            else:
                client = docker.from_env(version=version, timeout=timeout)

            # Test connection
            client.ping()
            logger.info("Successfully connected to Docker daemon")
        except DockerException as e:
            logger.error(f"Failed to connect to Docker daemon: {e}")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to connect to Docker daemon: {e}")
            raise DockerException(f"Docker daemon unreachable: {e}") from e
        return cls(client)

    def ping(self) -> bool:
        """Return True if the daemon answers a ping."""
        try:
            return bool(self.client.ping())
        except CLIENT_ERRORS as e:
            logger.warning(f"Docker ping failed: {e}")
            return False

    def list_container_ids(self) -> List[str]:
        """
        List the IDs of all running containers.

        Returns:
            Container IDs in the order reported by the daemon.

        Raises:
            EnumerationError: If the daemon is unreachable or the listing fails.
        """
        try:
            containers = self.client.api.containers()
        except CLIENT_ERRORS as e:
            raise EnumerationError(f"Failed to list containers: {e}") from e

        try:
            container_ids = [container['Id'] for container in containers]
        except (KeyError, TypeError) as e:
            raise EnumerationError(f"Unexpected container listing: {e}") from e

        logger.debug(f"Found {len(container_ids)} running containers")
        return container_ids

    def fetch_stats(self, container_id: str) -> ContainerStatsSnapshot:
        """
        Fetch one stats snapshot for a container.

        The non-streaming call lets the daemon populate both ``cpu_stats`` and
        ``precpu_stats``. The SDK reads the whole response body and releases
        the connection before returning, on success and on error.

        Args:
            container_id: Container ID.

        Returns:
            ContainerStatsSnapshot

        Raises:
            DecodeError: If the payload is not valid JSON or has an unexpected shape.
            FetchError: If the daemon refuses or fails the request.
        """
        try:
            stats = self.client.api.stats(container_id, stream=False)
        except ValueError as e:
            # requests' JSONDecodeError derives from ValueError
            raise DecodeError(container_id, f"invalid stats payload: {e}") from e
        except CLIENT_ERRORS as e:
            raise FetchError(container_id, str(e)) from e

        return ContainerStatsSnapshot.from_api(container_id, stats)

    def close(self):
        """Close the Docker client connection."""
        try:
            self.client.close()
            logger.info("Docker client connection closed")
        except CLIENT_ERRORS as e:
            logger.error(f"Error closing Docker client: {e}")
