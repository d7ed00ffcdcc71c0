"""
Exporter Configuration
======================
Runtime settings for the Docker state exporter.

Values are read from environment variables (a .env file in the working
directory is loaded first) and may be overridden on the command line.

Environment Variables:
    LISTEN_ADDRESS: Address to serve HTTP on (default: ":8080")
    DOCKER_HOST: Docker daemon URL (default: Docker SDK environment defaults)
    DOCKER_TIMEOUT: Deadline in seconds for Docker API calls (default: 10)
    CACHE_TTL: Seconds a container snapshot is reused (default: 1.0)
    LOG_LEVEL: Logging level name (default: "INFO")
"""
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_LISTEN_ADDRESS = ":8080"
DEFAULT_DOCKER_TIMEOUT = 10.0
DEFAULT_CACHE_TTL = 1.0
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a "host:port" listen address.

    An empty host (":8080") binds all interfaces.

    Args:
        address: Listen address

    Returns:
        (host, port) tuple

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port, got {address!r}")

    host = host.strip("[]") or "0.0.0.0"
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}") from None

    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in listen address {address!r}")
    return host, port


@dataclass
class ExporterConfig:
    """
    Configuration for the exporter process.

    Attributes:
        listen_address: HTTP listen address ("host:port")
        docker_host: Docker daemon URL, None for SDK defaults
        docker_timeout: Deadline for each Docker API call in seconds
        cache_ttl: Snapshot reuse window in seconds
        log_level: Logging level name
    """
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    docker_host: Optional[str] = None
    docker_timeout: float = DEFAULT_DOCKER_TIMEOUT
    cache_ttl: float = DEFAULT_CACHE_TTL
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if self.cache_ttl < 0:
            raise ValueError(f"cache_ttl must be >= 0, got {self.cache_ttl}")
        if self.docker_timeout <= 0:
            raise ValueError(f"docker_timeout must be > 0, got {self.docker_timeout}")
        # Fail early on a bad address
        parse_listen_address(self.listen_address)

    @property
    def host(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return parse_listen_address(self.listen_address)[1]

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "ExporterConfig":
        """
        Create ExporterConfig from environment variables.

        Args:
            load_env_file: Load a .env file before reading the environment

        Returns:
            ExporterConfig instance
        """
        if load_env_file:
            load_dotenv()

        return cls(
            listen_address=os.environ.get("LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
            docker_host=os.environ.get("DOCKER_HOST") or None,
            docker_timeout=float(os.environ.get("DOCKER_TIMEOUT", DEFAULT_DOCKER_TIMEOUT)),
            cache_ttl=float(os.environ.get("CACHE_TTL", DEFAULT_CACHE_TTL)),
            log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
