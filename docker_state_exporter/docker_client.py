"""
Docker API client for sampling container state.

This module wraps the Docker SDK to produce snapshots of every container on
the host. It does no caching of its own; see collector.CachedCollector.
"""

import logging
from typing import List, Optional, Tuple

import docker
import requests
from docker.errors import DockerException, NotFound

from docker_state_exporter.config import DEFAULT_DOCKER_TIMEOUT
from docker_state_exporter.errors import RuntimeUnavailable
from docker_state_exporter.models import ContainerRecord

logger = logging.getLogger(__name__)

# Immutable sequence of container records captured in one fetch
Snapshot = Tuple[ContainerRecord, ...]

_RUNTIME_ERRORS = (DockerException, requests.exceptions.RequestException)


class DockerStateSource:
    """Fetches container state snapshots from the Docker daemon."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_DOCKER_TIMEOUT,
        client: Optional[docker.DockerClient] = None,
    ):
        """
        Initialize the Docker client.

        Args:
            base_url: Docker daemon URL (e.g. unix:///var/run/docker.sock).
                If None, uses DOCKER_HOST and friends from the environment.
            timeout: Deadline in seconds for every Docker API call
            client: Pre-built client, mainly for tests

        Raises:
            RuntimeUnavailable: If the client cannot be created
        """
        if client is not None:
            self.client = client
            return

        try:
            if base_url:
                self.client = docker.DockerClient(base_url=base_url, timeout=timeout)
            else:
                self.client = docker.from_env(timeout=timeout)
        except _RUNTIME_ERRORS as e:
            logger.error(f"Failed to create Docker client: {e}")
            raise RuntimeUnavailable(f"Cannot connect to Docker daemon: {e}") from e

    def ping(self) -> None:
        """
        Check that the Docker daemon answers.

        Raises:
            RuntimeUnavailable: If the daemon is unreachable
        """
        try:
            self.client.ping()
        except _RUNTIME_ERRORS as e:
            raise RuntimeUnavailable(f"Docker daemon did not answer ping: {e}") from e
        logger.info("Successfully connected to Docker daemon")

    def list_container_ids(self) -> List[str]:
        """
        List the IDs of all containers, whatever their state.

        Raises:
            RuntimeUnavailable: If the listing fails
        """
        try:
            containers = self.client.api.containers(all=True)
        except _RUNTIME_ERRORS as e:
            raise RuntimeUnavailable(f"Failed to list containers: {e}") from e

        try:
            return [container['Id'] for container in containers]
        except (KeyError, TypeError) as e:
            raise RuntimeUnavailable(f"Malformed container list: {e}") from e

    def inspect(self, container_id: str) -> Optional[ContainerRecord]:
        """
        Inspect a single container.

        Args:
            container_id: Container ID

        Returns:
            ContainerRecord, or None if the container no longer exists

        Raises:
            RuntimeUnavailable: On any other Docker error or bad payload
        """
        try:
            data = self.client.api.inspect_container(container_id)
        except NotFound:
            logger.debug(f"Container {container_id} disappeared before inspect")
            return None
        except _RUNTIME_ERRORS as e:
            raise RuntimeUnavailable(f"Failed to inspect container {container_id}: {e}") from e

        return ContainerRecord.from_inspect(data)

    def fetch(self) -> Snapshot:
        """
        Capture the state of every container.

        Containers are listed first, then inspected one by one. A container
        removed in between is left out of the snapshot.

        Returns:
            Snapshot of container records, in listing order

        Raises:
            RuntimeUnavailable: If Docker fails or returns malformed data
        """
        records = []
        for container_id in self.list_container_ids():
            record = self.inspect(container_id)
            if record is not None:
                records.append(record)
        return tuple(records)

    def close(self):
        """Close the Docker client connection."""
        try:
            self.client.close()
            logger.info("Docker client connection closed")
        except _RUNTIME_ERRORS as e:
            logger.error(f"Error closing Docker client: {e}")
