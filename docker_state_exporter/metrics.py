"""
Prometheus metric definitions for container state.

Every container series is a gauge. Names and help strings follow the
conventions of the cAdvisor container_* family so existing dashboards keep
working.
"""

from collections import namedtuple

# One exported sample: metric name, label dictionary, float value
MetricSample = namedtuple('MetricSample', ['name', 'labels', 'value'])

MetricDesc = namedtuple('MetricDesc', ['name', 'help'])

NAMESPACE = 'container_state_'

# One-hot health check state, `status` label in {none, starting, healthy, unhealthy}
HEALTH_STATUS = MetricDesc(NAMESPACE + 'health_status', 'Container health status.')

# One-hot container state, `status` label in {paused, restarting, running, ...}
STATUS = MetricDesc(NAMESPACE + 'status', 'Container status.')

OOM_KILLED = MetricDesc(NAMESPACE + 'oomkilled', 'Container was killed by OOMKiller.')

STARTED_AT = MetricDesc(NAMESPACE + 'startedat', 'Time when the Container started.')

FINISHED_AT = MetricDesc(NAMESPACE + 'finishedat', 'Time when the Container finished.')

RESTART_COUNT = MetricDesc(
    'container_restartcount',
    'Number of times the container has been restarted'
)

# Exposition order
ALL_METRICS = (
    HEALTH_STATUS,
    STATUS,
    OOM_KILLED,
    STARTED_AT,
    FINISHED_AT,
    RESTART_COUNT,
)

# Exporter build information
BUILD_INFO_NAME = 'docker_state_exporter_build'
BUILD_INFO_HELP = 'Docker state exporter build information'
