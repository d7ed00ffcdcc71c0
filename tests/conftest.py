"""
Pytest configuration and shared fixtures
"""
import copy
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: mark test as requiring a running Docker daemon"
    )


def make_inspect(container_id="abc123", name="/web", status="running", health=None,
                 labels=None, oom_killed=False,
                 started_at="2023-01-01T00:00:00.000000000Z",
                 finished_at="0001-01-01T00:00:00Z", restart_count=0,
                 image="nginx:latest"):
    """Build a `docker inspect` payload as returned by the Docker API."""
    state = {
        "Status": status,
        "Running": status == "running",
        "OOMKilled": oom_killed,
        "StartedAt": started_at,
        "FinishedAt": finished_at,
    }
    if health is not None:
        state["Health"] = {"Status": health, "FailingStreak": 0, "Log": []}

    return {
        "Id": container_id,
        "Name": name,
        "RestartCount": restart_count,
        "State": state,
        "Config": {"Image": image, "Labels": labels},
    }


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def inspect_payload():
    """Factory for inspect payloads"""
    return make_inspect


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_docker_client():
    """
    Mock docker.DockerClient whose low-level API serves the given payloads.

    Set `mock_docker_client.payloads` to a list of inspect dictionaries.
    """
    client = MagicMock()
    client.payloads = []

    def containers(all=False):
        return [{"Id": p["Id"]} for p in client.payloads]

    def inspect_container(container_id):
        for payload in client.payloads:
            if payload["Id"] == container_id:
                return copy.deepcopy(payload)
        raise AssertionError(f"unexpected inspect of {container_id}")

    client.api.containers.side_effect = containers
    client.api.inspect_container.side_effect = inspect_container
    return client
