"""
Cached Prometheus collector for container state.

Scrapes may arrive concurrently or in quick succession. Inspecting every
container is expensive, so the snapshot taken from Docker is kept for a short
TTL and shared by all scrapes inside that window. Refresh and expansion run
under one lock: at most one refresh is in flight, and every scrape is built
from exactly one snapshot.
"""

import logging
import threading
import time
from typing import Callable, Iterator, List, Optional

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from docker_state_exporter import metrics
from docker_state_exporter.config import DEFAULT_CACHE_TTL
from docker_state_exporter.docker_client import DockerStateSource, Snapshot
from docker_state_exporter.labels import container_labels
from docker_state_exporter.metrics import MetricSample
from docker_state_exporter.models import ContainerRecord, ContainerStatus, HealthStatus

logger = logging.getLogger(__name__)


def _b2f(value: bool) -> float:
    return 1.0 if value else 0.0


def expand_record(record: ContainerRecord) -> List[MetricSample]:
    """
    Expand one container record into metric samples.

    Health and status are exported as one indicator series per possible
    value, each tagged with a `status` label.

    Args:
        record: Container state record

    Returns:
        List of samples for this container

    Raises:
        TimestampParseError: If StartedAt or FinishedAt is not RFC3339
    """
    labels = container_labels(record)
    samples = []

    for health in HealthStatus.indicator_values():
        samples.append(MetricSample(
            metrics.HEALTH_STATUS.name,
            dict(labels, status=health.value),
            _b2f(record.health_status == health),
        ))

    for status in ContainerStatus.indicator_values():
        samples.append(MetricSample(
            metrics.STATUS.name,
            dict(labels, status=status.value),
            _b2f(record.status == status),
        ))

    samples.append(MetricSample(metrics.OOM_KILLED.name, dict(labels), _b2f(record.oom_killed)))
    samples.append(MetricSample(metrics.STARTED_AT.name, dict(labels), float(record.started_at_seconds)))
    samples.append(MetricSample(metrics.FINISHED_AT.name, dict(labels), float(record.finished_at_seconds)))
    samples.append(MetricSample(metrics.RESTART_COUNT.name, dict(labels), float(record.restart_count)))
    return samples


def expand_snapshot(snapshot: Snapshot) -> List[MetricSample]:
    """Expand every record of a snapshot, failing on the first bad record."""
    samples = []
    for record in snapshot:
        samples.extend(expand_record(record))
    return samples


class CachedCollector(Collector):
    """Prometheus collector serving container state from a short-lived cache."""

    def __init__(
        self,
        source: DockerStateSource,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            source: Snapshot source, usually a DockerStateSource
            ttl: Seconds a snapshot may be reused
            clock: Monotonic time function
        """
        self.source = source
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Snapshot = ()
        self._last_refresh: Optional[float] = None

    def _is_stale(self, now: float) -> bool:
        return self._last_refresh is None or now - self._last_refresh >= self.ttl

    def _refresh(self, now: float) -> None:
        start_time = time.time()
        # Errors propagate; the previous snapshot is left untouched
        snapshot = self.source.fetch()
        self._snapshot = snapshot
        self._last_refresh = now
        logger.debug(
            f"Refreshed snapshot of {len(snapshot)} containers "
            f"in {time.time() - start_time:.3f} seconds"
        )

    def samples(self) -> List[MetricSample]:
        """
        Return the samples for one scrape.

        Refreshes the snapshot first if it is older than the TTL.

        Raises:
            RuntimeUnavailable: If the refresh fails
            TimestampParseError: If a record holds an invalid timestamp
        """
        with self._lock:
            now = self._clock()
            if self._is_stale(now):
                self._refresh(now)
            return expand_snapshot(self._snapshot)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        """Yield one gauge family per container metric."""
        families = {
            desc.name: GaugeMetricFamily(desc.name, desc.help)
            for desc in metrics.ALL_METRICS
        }
        for sample in self.samples():
            families[sample.name].add_sample(sample.name, sample.labels, sample.value)
        yield from families.values()

    def describe(self) -> Iterator[GaugeMetricFamily]:
        """Describe metrics without querying Docker."""
        for desc in metrics.ALL_METRICS:
            yield GaugeMetricFamily(desc.name, desc.help)
