"""
Main Docker Stats Exporter application.

This module implements the HTTP server that exposes Docker container
statistics in Prometheus format. Stats are read from Docker on every scrape of
``/metrics``; there is no background polling loop.
"""

import sys
import logging
import signal
from typing import Optional

from flask import Flask, Response
from prometheus_client import generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from pydantic import ValidationError
from docker.errors import DockerException

from container_exporter import __version__
from container_exporter.collector import DockerCollector
from container_exporter.config import ExporterConfig
from container_exporter.docker_client import DockerStatsClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


class DockerMetricsExporter:
    """Serves container metrics collected on demand from Docker."""

    def __init__(
        self,
        config: ExporterConfig,
        stats_client: Optional[DockerStatsClient] = None,
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Initialize the Docker metrics exporter.

        Args:
            config: Exporter configuration
            stats_client: Already connected client; connected in start() when None
            registry: Registry to expose; a fresh one is created when None
        """
        self.config = config
        self.registry = registry or CollectorRegistry()
        self.docker_client = None
        self.collector = None

        # Flask app for HTTP server
        self.app = Flask(__name__)
        self._setup_routes()

        if stats_client is not None:
            self._register(stats_client)

    def _register(self, stats_client: DockerStatsClient):
        self.docker_client = stats_client
        self.collector = DockerCollector(
            stats_client,
            fetch_workers=self.config.fetch_workers,
            scrape_timeout=self.config.scrape_timeout
        )
        self.registry.register(self.collector)

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/metrics')
        def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(generate_latest(self.registry), content_type=CONTENT_TYPE_LATEST)

        @self.app.route('/health')
        def health():
            """Health check endpoint."""
            if self.docker_client:
                if self.docker_client.ping():
                    return {'status': 'healthy', 'docker': 'connected'}, 200
                return {'status': 'unhealthy', 'docker': 'disconnected'}, 503
            return {'status': 'initializing'}, 503

        @self.app.route('/')
        def root():
            """Root endpoint with information."""
            return {
                'name': 'Docker Stats Exporter',
                'version': __version__,
                'endpoints': {
                    '/metrics': 'Prometheus metrics',
                    '/health': 'Health check'
                }
            }

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()
        sys.exit(0)

    def start(self):
        """Connect to Docker if needed and serve HTTP until interrupted."""
        logger.info("Starting Docker Stats Exporter...")
        logger.info(f"HTTP port: {self.config.port}")

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        if self.docker_client is None:
            try:
                stats_client = DockerStatsClient.connect(
                    base_url=self.config.docker_host,
                    version=self.config.docker_api_version,
                    timeout=self.config.docker_timeout
                )
            except DockerException as e:
                logger.error(f"Failed to initialize Docker client: {e}")
                logger.error("Make sure Docker socket is mounted and accessible")
                sys.exit(1)
            self._register(stats_client)

        logger.info(f"Starting HTTP server on port {self.config.port}...")
        try:
            self.app.run(host=self.config.host, port=self.config.port, threaded=True)
        except OSError as e:
            logger.error(f"Failed to start HTTP server: {e}")
            self.stop()
            sys.exit(1)

    def stop(self):
        """Stop the exporter."""
        logger.info("Stopping Docker Stats Exporter...")

        if self.collector:
            self.registry.unregister(self.collector)
            self.collector = None

        if self.docker_client:
            self.docker_client.close()
            self.docker_client = None

        logger.info("Exporter stopped")


def main():
    """Main entry point."""
    try:
        config = ExporterConfig()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)

    logger.info(f"Docker Stats Exporter v{__version__}")
    logger.info(
        f"Configuration: port={config.port}, api_version={config.docker_api_version}, "
        f"fetch_workers={config.fetch_workers}, scrape_timeout={config.scrape_timeout}"
    )

    exporter = DockerMetricsExporter(config)

    try:
        exporter.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        exporter.stop()


if __name__ == '__main__':
    main()
