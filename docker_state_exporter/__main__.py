"""
Entry point for the Docker State Exporter.

Usage:
    python -m docker_state_exporter --listen-address :8080
    python -m docker_state_exporter --help
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from docker_state_exporter import __version__
from docker_state_exporter.config import LOG_LEVELS, ExporterConfig
from docker_state_exporter.exporter import DockerStateExporter, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docker-state-exporter",
        description="Prometheus exporter for Docker container state",
    )
    parser.add_argument(
        "--listen-address",
        help="The address to listen on for HTTP requests (default: :8080)",
    )
    parser.add_argument(
        "--docker-host",
        help="Docker daemon URL (default: from DOCKER_HOST / environment)",
    )
    parser.add_argument(
        "--docker-timeout",
        type=float,
        help="Deadline in seconds for Docker API calls (default: 10)",
    )
    parser.add_argument(
        "--cache-ttl",
        type=float,
        help="Seconds to reuse a container snapshot across scrapes (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def load_config(argv: Optional[List[str]] = None) -> ExporterConfig:
    """
    Build the configuration from the environment and command line.

    Command line flags take precedence over environment variables.
    """
    args = build_parser().parse_args(argv)
    config = ExporterConfig.from_env()

    overrides = {
        "listen_address": args.listen_address,
        "docker_host": args.docker_host,
        "docker_timeout": args.docker_timeout,
        "cache_ttl": args.cache_ttl,
        "log_level": args.log_level,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        config = load_config(argv)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)
    DockerStateExporter(config).start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
