"""
Main Docker State Exporter application.

This module implements the HTTP server that exposes container state in
Prometheus format. Metrics are gathered on demand by the cached collector
during each scrape; there is no background collection loop.
"""

import logging
import platform
import signal
import sys
from typing import Optional

from flask import Flask, Response, request
from prometheus_client import CollectorRegistry, Info
from prometheus_client.exposition import choose_encoder

from docker_state_exporter import __version__, metrics
from docker_state_exporter.collector import CachedCollector
from docker_state_exporter.config import ExporterConfig
from docker_state_exporter.docker_client import DockerStateSource
from docker_state_exporter.errors import ExporterError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


class _BelowErrorFilter(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.ERROR


def setup_logging(level: str = 'INFO'):
    """
    Configure root logging.

    Records below ERROR go to stdout, ERROR and above to stderr.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_BelowErrorFilter())

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.ERROR)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )


def create_registry(collector: CachedCollector) -> CollectorRegistry:
    """
    Build the registry served on /metrics.

    Args:
        collector: Container state collector

    Returns:
        Registry holding the collector and build information
    """
    registry = CollectorRegistry()
    registry.register(collector)

    build_info = Info(metrics.BUILD_INFO_NAME, metrics.BUILD_INFO_HELP, registry=registry)
    build_info.info({
        'version': __version__,
        'python_version': platform.python_version(),
    })
    return registry


def create_app(registry: CollectorRegistry) -> Flask:
    """
    Create the Flask app serving the exporter endpoints.

    Args:
        registry: Registry rendered on /metrics

    Returns:
        Flask application
    """
    app = Flask(__name__)

    @app.route('/')
    def root():
        """Root endpoint with information."""
        return '<h1>docker state exporter</h1>'

    @app.route('/-/healthy')
    def healthy():
        """Liveness endpoint."""
        return Response('up', mimetype='text/plain')

    @app.route('/metrics')
    def metrics_endpoint():
        """Prometheus metrics endpoint."""
        encoder, content_type = choose_encoder(request.headers.get('Accept'))
        try:
            output = encoder(registry)
        except ExporterError as e:
            logger.error(f"Failed to collect container metrics: {e}")
            return Response(f"error collecting metrics: {e}\n", status=500, mimetype='text/plain')
        return Response(output, content_type=content_type)

    return app


class DockerStateExporter:
    """Exporter process: Docker connection, HTTP server and shutdown."""

    def __init__(self, config: ExporterConfig):
        """
        Initialize the exporter.

        Args:
            config: Exporter configuration
        """
        self.config = config
        self.source: Optional[DockerStateSource] = None
        self.app: Optional[Flask] = None

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()
        sys.exit(0)

    def setup(self):
        """
        Connect to Docker and build the HTTP app.

        Raises:
            RuntimeUnavailable: If the Docker daemon is unreachable
        """
        self.source = DockerStateSource(
            base_url=self.config.docker_host,
            timeout=self.config.docker_timeout,
        )
        self.source.ping()

        collector = CachedCollector(self.source, ttl=self.config.cache_ttl)
        self.app = create_app(create_registry(collector))

    def start(self):
        """Start the exporter and block serving HTTP."""
        logger.info(f"Starting Docker State Exporter v{__version__}...")
        logger.info(
            f"Configuration: listen_address={self.config.listen_address}, "
            f"cache_ttl={self.config.cache_ttl}s, docker_timeout={self.config.docker_timeout}s"
        )

        try:
            self.setup()
        except ExporterError as e:
            logger.error(f"Failed to initialize Docker client: {e}")
            logger.error("Make sure Docker socket is mounted and accessible")
            sys.exit(1)

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        host, port = self.config.host, self.config.port
        logger.info(f"Server listening on {host}:{port}...")
        self.app.run(host=host, port=port, threaded=True)

    def stop(self):
        """Stop the exporter."""
        logger.info("Server shutting down...")
        if self.source:
            self.source.close()
        logger.info("Server shutdown")
