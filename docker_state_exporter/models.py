"""
Container state records built from Docker inspect payloads.

A ContainerRecord is the normalized, immutable view of one `docker inspect`
result. Optional sub-records (health block, label map, config) are filled in
with defaults here so the collector never sees missing fields.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping

from docker_state_exporter.errors import RuntimeUnavailable, TimestampParseError


class ContainerStatus(str, Enum):
    """Docker container state (State.Status)."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    REMOVING = "removing"
    EXITED = "exited"
    DEAD = "dead"

    @classmethod
    def indicator_values(cls) -> List["ContainerStatus"]:
        """All statuses, in the order their indicator series are exported."""
        return [
            cls.PAUSED,
            cls.RESTARTING,
            cls.RUNNING,
            cls.REMOVING,
            cls.DEAD,
            cls.CREATED,
            cls.EXITED,
        ]


class HealthStatus(str, Enum):
    """Docker health check state (State.Health.Status)."""

    NONE = "none"
    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"

    @classmethod
    def indicator_values(cls) -> List["HealthStatus"]:
        """All health states, in the order their indicator series are exported."""
        return [cls.NONE, cls.STARTING, cls.HEALTHY, cls.UNHEALTHY]


_RFC3339_RE = re.compile(
    r'([0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2})'
    r'(?:\.([0-9]+))?'
    r'(Z|[+-][0-9]{2}:[0-9]{2})'
)
_EPOCH = datetime(1970, 1, 1)


def _strip_separator(name: str) -> str:
    # Docker prefixes names with the parent path separator
    if name.startswith('/'):
        return name[1:]
    return name


def parse_rfc3339(value: str) -> int:
    """
    Convert an RFC3339 timestamp to Unix epoch seconds.

    Fractional seconds (Docker reports nanoseconds) are truncated. The zero
    value Docker uses for "never" (0001-01-01T00:00:00Z) is a valid timestamp
    and converts like any other.

    Args:
        value: Timestamp string, e.g. "2023-01-01T00:00:00.000000000Z"

    Returns:
        Whole seconds since the Unix epoch

    Raises:
        TimestampParseError: If the value is not RFC3339
    """
    if not isinstance(value, str):
        raise TimestampParseError(str(value))

    match = _RFC3339_RE.fullmatch(value)
    if not match:
        raise TimestampParseError(value)

    base, _fraction, zone = match.groups()
    try:
        naive = datetime.strptime(base, '%Y-%m-%dT%H:%M:%S')
    except ValueError as e:
        raise TimestampParseError(value) from e

    offset = 0
    if zone != 'Z':
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            raise TimestampParseError(value)
        offset = hours * 3600 + minutes * 60
        if zone[0] == '-':
            offset = -offset

    return int((naive - _EPOCH).total_seconds()) - offset


@dataclass(frozen=True)
class ContainerRecord:
    """State of a single container at snapshot time."""

    id: str
    name: str
    image: str
    status: ContainerStatus
    health_status: HealthStatus = HealthStatus.NONE
    labels: Mapping[str, str] = field(default_factory=dict)
    oom_killed: bool = False
    started_at: str = ""
    finished_at: str = ""
    restart_count: int = 0

    @property
    def started_at_seconds(self) -> int:
        return parse_rfc3339(self.started_at)

    @property
    def finished_at_seconds(self) -> int:
        return parse_rfc3339(self.finished_at)

    @classmethod
    def from_inspect(cls, data: Dict[str, Any]) -> "ContainerRecord":
        """
        Build a record from a `docker inspect` payload.

        Args:
            data: Raw inspect dictionary from the Docker API

        Returns:
            ContainerRecord

        Raises:
            RuntimeUnavailable: If the payload is missing required fields or
                carries values Docker does not define
        """
        try:
            container_id = data['Id']
            state = data['State']
            config = data.get('Config') or {}
            health = state.get('Health') or {}

            status = ContainerStatus(state['Status'])
            health_status = HealthStatus(health.get('Status') or HealthStatus.NONE.value)

            restart_count = int(data.get('RestartCount') or 0)
            if restart_count < 0:
                raise ValueError(f"negative RestartCount {restart_count}")

            return cls(
                id=container_id,
                name=_strip_separator(data.get('Name') or ''),
                image=config.get('Image') or '',
                status=status,
                health_status=health_status,
                labels=dict(config.get('Labels') or {}),
                oom_killed=bool(state.get('OOMKilled', False)),
                started_at=state.get('StartedAt') or '',
                finished_at=state.get('FinishedAt') or '',
                restart_count=restart_count,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            container_id = data.get('Id', 'unknown') if isinstance(data, dict) else 'unknown'
            raise RuntimeUnavailable(
                f"Malformed inspect data for container {container_id}: {e}"
            ) from e
